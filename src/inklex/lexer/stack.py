"""Context stack machine.

Pure transitions over the immutable ``ContextStack``.  The root entry
is never removed, so a stack can never become empty.
"""
from __future__ import annotations

from inklex.grammar.rules import Directive, DirectiveKind
from inklex.grammar.tokens import ContextId, ContextStack


def push(stack: ContextStack, context_id: ContextId) -> ContextStack:
    """Enter ``context_id`` on top of the current context."""
    return ContextStack((*stack.entries, context_id))


def pop(stack: ContextStack) -> ContextStack:
    """Leave the current context; a no-op when only the root remains."""
    if stack.depth == 1:
        return stack
    return ContextStack(stack.entries[:-1])


def replace(stack: ContextStack, context_id: ContextId) -> ContextStack:
    """Swap the current context for a sibling (the ``next`` directive)."""
    return ContextStack((*stack.entries[:-1], context_id))


def apply_directive(stack: ContextStack, directive: Directive | None) -> ContextStack:
    """Apply a matched rule's directive; ``None`` leaves the stack unchanged."""
    if directive is None:
        return stack
    if directive.kind is DirectiveKind.POP:
        return pop(stack)
    target = directive.target
    if target is None:
        raise ValueError(f"{directive.kind.name} directive has no target")
    if directive.kind is DirectiveKind.PUSH:
        return push(stack, target)
    return replace(stack, target)
