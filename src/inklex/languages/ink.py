"""Rule table and metadata for the ink narrative scripting language.

The table is ordered data: within every context the first rule that
matches at the cursor wins, so more specific forms (``-> DONE``, tunnels,
parameterized diverts) are listed before the general ones.  Contexts are
referenced by name and may include each other cyclically.

Label conventions consumed by hosts:

- ``flow.knot.declaration.name`` / ``flow.stitch.declaration.name``:
  declared knot and stitch names.
- ``divert.target``: the target of a divert, used for hyperlinking.
- ``choice.label.name`` / ``gather.label.name``: labeled weave points.
"""
from __future__ import annotations

from typing import Any, Final

from inklex.languages.base import BlockComment, Language
from inklex.languages.registry import registry

_COMMENT_PUNCTUATION: Final[str] = "punctuation.definition.comment.json"

# Dotted divert path, e.g. ``knot.stitch``; stops before trailing whitespace.
_TARGET: Final[str] = r"(\w[\w\.\s]*?)(\s*)"

INK_RULES: Final[dict[str, list[dict[str, Any]]]] = {
    "start": [
        {"include": "escapes"},
        {"include": "comments"},
        {
            # == function name(params) ==
            "regex": (
                r"^(\s*)(={2,})(\s*)((?:function\b)?)(\s*)(\w+)(\s*)"
                r"(\([\w,\s\->]*\))?(\s*)((?:={1,})?)"
            ),
            "token": [
                None,
                "flow.knot.declaration.punctuation",
                "flow.knot.declaration",
                "flow.knot.declaration.function",
                "flow.knot.declaration",
                "flow.knot.declaration.name",
                "flow.knot.declaration",
                "flow.knot.declaration.parameters",
                "flow.knot.declaration",
                "flow.knot.declaration.punctuation",
            ],
        },
        {
            # = stitch_name(params)
            "regex": r"^(\s*)(=)(\s*)(\w+)(\s*)(\([\w,\s\->]*\))?",
            "token": [
                "flow.stitch.declaration",
                "flow.stitch.declaration.punctuation",
                "flow.stitch.declaration",
                "flow.stitch.declaration.name",
                "flow.stitch.declaration",
                "flow.stitch.declaration.parameters",
            ],
        },
        {"include": "statements"},
    ],
    "TODO": [
        {"regex": r"^(\s*)(TODO\b)(.*)", "token": ["todo", "todo.TODO", "todo"]},
    ],
    "choice": [
        {
            "regex": r"(\s*)((?:[\*\+]\s?)+)(\s*)(?:(\(\s*)(\w+)(\s*\)))?",
            "token": [
                "choice",
                "choice.bullets",
                "choice",
                "choice.label",
                "choice.label.name",
                "choice.label",
            ],
            "push": [
                {"regex": r"$", "token": "choice", "pop": True},
                {
                    "regex": r"\s*\[\s*",
                    "token": "choice.weaveBracket",
                    "push": [
                        {"regex": r"\s*\]\s*", "token": "choice.weaveBracket", "pop": True},
                        {"include": "inlineContent"},
                        {"default": "choice.weaveInsideBrackets"},
                    ],
                },
                {"include": "mixedContent"},
                {"default": "choice"},
            ],
        },
    ],
    "escapes": [
        {"regex": r"\\[\[\]()\\~{}\/#*+-]", "token": "escape"},
    ],
    "comments": [
        {
            "regex": r"/\*\*",
            "token": _COMMENT_PUNCTUATION,
            "push": [
                {"regex": r"\*/", "token": _COMMENT_PUNCTUATION, "pop": True},
                {"default": "comment.block.documentation.json"},
            ],
        },
        {
            "regex": r"/\*",
            "token": _COMMENT_PUNCTUATION,
            "push": [
                {"regex": r"\*/", "token": _COMMENT_PUNCTUATION, "pop": True},
                {"default": "comment.block.json"},
            ],
        },
        {
            "regex": r"(//)(.*$)",
            "token": [_COMMENT_PUNCTUATION, "comment.line.double-slash.js"],
        },
    ],
    # Divert forms are tried from most to least specific; the targets must
    # be parsed accurately for hyperlinking.
    "divert": [
        {
            # -> DONE / -> END
            "regex": r"(->|<-)(\s*)(DONE|END)\b(\s*)",
            "token": ["divert.operator", "divert", "divert.to-special", "divert"],
        },
        {
            # ->-> onwards_target
            "regex": r"(->->)(\s*)" + _TARGET + r"(?![\w\.])",
            "token": ["divert.to-tunnel", "divert", "divert.target", "divert"],
        },
        {
            # -> knot(param, -> other)
            "regex": r"(->|<-)(\s*)" + _TARGET + r"(\()",
            "token": [
                "divert.operator",
                "divert",
                "divert.target",
                "divert",
                "divert.operator",
            ],
            "push": [
                {
                    "regex": r"(->)(\s*)" + _TARGET + r"(?![\w\.])",
                    "token": [
                        "divert.parameter.operator",
                        "divert.parameter",
                        "divert.target",
                        "divert.parameter",
                    ],
                },
                {"include": "functionCallInDivertParameter"},
                {"regex": r"\)", "token": "divert.parameter.operator", "pop": True},
                {"default": "divert.parameter"},
            ],
        },
        {
            # -> knot.stitch
            "regex": r"(->|<-)(\s*)" + _TARGET + r"(?![\w\.])",
            "token": ["divert.operator", "divert", "divert.target", "divert"],
        },
        {
            # gather/choice point, or the end of a tunnel
            "regex": r"->",
            "token": "divert.operator",
        },
    ],
    # Function calls inside divert parameters, so that their closing
    # bracket does not end the parameter list.
    "functionCallInDivertParameter": [
        {
            "regex": r"\w+\s*\(",
            "token": "divert.parameter",
            "push": [
                {"include": "functionCallInDivertParameter"},
                {"regex": r"\)", "token": "divert.parameter", "pop": True},
                {"default": "divert.parameter"},
            ],
        },
    ],
    "gather": [
        {
            "regex": r"^(\s*)((?:-(?!>)\s*)+)",
            "token": ["gather", "gather.bullets"],
            "push": [
                {"regex": r"$", "token": "gather", "pop": True},
                {"include": "escapes"},
                {"include": "comments"},
                {"include": "logicLineInsert"},
                {
                    "regex": r"(\(\s*)(\w+)(\s*\)\s*)",
                    "token": ["gather.label", "gather.label.name", "gather.label"],
                },
                {"include": "choice"},
                {"include": "mixedContent"},
                {"default": "gather.innerContent"},
            ],
        },
    ],
    "globalVAR": [
        {
            "regex": r"^(\s*)(VAR|CONST)\b",
            "token": ["var-decl", "var-decl.keyword"],
            "push": [
                {
                    "regex": r"(\s*)(\w+)(\s*)",
                    "token": ["var-decl", "var-decl.name", "var-decl"],
                    "next": "varAssignment",
                },
                {"regex": r"$", "token": "var-decl", "pop": True},
                {"include": "comments"},
                {"default": "var-decl"},
            ],
        },
    ],
    # Everything after the declared name up to the end of the line.
    "varAssignment": [
        {"regex": r"$", "token": "var-decl", "pop": True},
        {"include": "comments"},
        {"default": "var-decl"},
    ],
    "listDef": [
        {
            "regex": r"^(\s*)(LIST)\b",
            "token": ["list-decl", "list-decl.keyword"],
            "push": [
                {
                    "regex": r"(\w+)(\s*=\s*)",
                    "token": ["list-decl.name", "list-decl"],
                    "next": "listItem",
                },
                {"regex": r"$", "pop": True},
                {"default": "list-decl"},
            ],
        },
    ],
    "listItemsSeparator": [
        {"regex": r"(\s*,\s*)", "token": ["list-decl"], "next": "listItem"},
        {"regex": r"$", "pop": True},
        {"default": "list-decl"},
    ],
    "listItem": [
        {"regex": r"([\w\(\)=\d\s]+)", "token": ["list-decl.item"], "next": "listItemsSeparator"},
        {"regex": r"$", "pop": True},
        {"default": "list-decl"},
    ],
    "INCLUDE": [
        {
            "regex": r"(\s*)(INCLUDE\b)",
            "token": ["include", "include.keyword"],
            "push": [
                {"regex": r"(\s*)([^\r\n]+)", "token": ["include", "include.filepath"]},
                {"regex": r"$", "token": "include", "pop": True},
                {"default": "include"},
            ],
        },
    ],
    "EXTERNAL": [
        {
            "regex": r"(\s*)(EXTERNAL\b)",
            "token": ["external", "external.keyword"],
            "push": [
                {"regex": r"(\s*)([^\r\n]+)", "token": ["external", "external.declaration"]},
                {"regex": r"$", "token": "external", "pop": True},
                {"default": "external"},
            ],
        },
    ],
    "inlineConditional": [
        {
            "regex": r"(\{)([^:\|\}]+:)",
            "token": ["logic.punctuation", "logic.inline.conditional.condition"],
            "push": [
                {"regex": r"\}", "token": "logic.inline.conditional.punctuation", "pop": True},
                {"regex": r"\|", "token": "logic.inline.conditional.punctuation"},
                {"include": "mixedContent"},
                {"default": "logic.inline.innerContent"},
            ],
        },
    ],
    "inlineSequence": [
        {
            # Only a sequence if a pipe follows before the closing brace.
            "regex": r"(\{)(\s*)((?:~|&|!|\$)?)(?=[^\|\}]*\|)",
            "token": ["logic.punctuation", "logic.sequence", "logic.sequence.operator"],
            "push": [
                {"regex": r"\}", "token": "logic.punctuation", "pop": True},
                {"regex": r"\|(?!\|)", "token": "logic.sequence.punctuation"},
                {"include": "mixedContent"},
                {"default": "logic.sequence.innerContent"},
            ],
        },
    ],
    "inlineLogic": [
        {
            "regex": r"\{",
            "token": "logic.punctuation",
            "push": [
                {"regex": r"\}", "token": "logic.punctuation", "pop": True},
                {"default": "logic.inline"},
            ],
        },
    ],
    "multiLineLogic": [
        {
            # A brace with no closing brace on the same line.
            "regex": r"^(\s*)(\{)(?:([^}:]+)(:))?(?=[^}]*$)",
            "token": [
                "logic",
                "logic.punctuation",
                "logic.conditional.multiline.condition",
                "logic.conditional.multiline.condition.punctuation",
            ],
            "push": [
                {"regex": r"\}", "token": "logic.punctuation", "pop": True},
                {"regex": r"^\s*else\s*:", "token": "conditional.multiline.else"},
                {
                    "regex": r"^(\s*)(-)(?!>)((?:\s?[^:\{}]+):)?",
                    "token": [
                        "logic.multiline.branch",
                        "logic.multiline.branch.operator",
                        "logic.multiline.branch.condition",
                    ],
                },
                {"include": "statements"},
                {"default": "logic.multiline.innerContent"},
            ],
        },
    ],
    "logicLine": [
        {
            "regex": r"^\s*~\s*",
            "token": "logic.tilda",
            "push": [
                {"regex": r"$", "token": "logic.tilda", "pop": True},
                {"include": "escapes"},
                {"include": "comments"},
                {"default": "logic.tilda"},
            ],
        },
    ],
    "logicLineInsert": [
        {
            "regex": r"\s*~\s*",
            "token": "logic.tilda",
            "push": [
                {"regex": r"$", "token": "logic.tilda", "pop": True},
                {"include": "escapes"},
                {"include": "comments"},
                {"default": "logic.tilda"},
            ],
        },
    ],
    "tags": [
        {
            "regex": r"#",
            "token": "tag",
            "push": [
                {"regex": r"$", "token": "tag", "pop": True},
                {"include": "comments"},
                {"default": "tag.innerContent"},
            ],
        },
    ],
    "inlineContent": [
        {"include": "inlineConditional"},
        {"include": "inlineSequence"},
        {"include": "inlineLogic"},
    ],
    "mixedContent": [
        {"include": "inlineContent"},
        {"include": "divert"},
        {"include": "tags"},
        {"regex": r"<>", "token": "glue"},
    ],
    "statements": [
        {"include": "comments"},
        {"include": "escapes"},
        {"include": "TODO"},
        {"include": "globalVAR"},
        {"include": "listDef"},
        {"include": "EXTERNAL"},
        {"include": "INCLUDE"},
        {"include": "choice"},
        {"include": "gather"},
        {"include": "multiLineLogic"},
        {"include": "logicLine"},
        {"include": "mixedContent"},
    ],
}

INK_KEYWORDS: Final[tuple[str, ...]] = (
    "CONST",
    "CHOICE_COUNT",
    "DONE",
    "END",
    "INCLUDE",
    "LIST",
    "LIST_ALL",
    "LIST_COUNT",
    "LIST_INVERT",
    "LIST_MAX",
    "LIST_MIN",
    "LIST_RANGE",
    "LIST_VALUE",
    "TODO",
    "TURNS_SINCE",
    "VAR",
)


@registry.register("ink")
class InkLanguage(Language):
    """The ink narrative scripting language."""

    name = "ink"
    display_name = "Ink"
    scope_name = "source.ink"
    file_types = ("ink", "ink2")
    line_comment = "//"
    block_comment = BlockComment(start="/*", end="*/")
    keywords = INK_KEYWORDS

    def rules(self) -> dict[str, list[dict[str, Any]]]:
        return INK_RULES
