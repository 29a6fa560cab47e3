"""
Scope descriptors for positions in a Go buffer.

Completion suppression is configured with TextMate-style scope selectors
(".comment.line.double-slash.go", ".string.quoted.double.go", ...). LSP
clients do not send scopes, so this module derives the few that matter
with a light lexical scan: comments, string and rune literals, and import
paths.
"""

from __future__ import annotations

import re


SOURCE = "source.go"
LINE_COMMENT = "comment.line.double-slash.go"
BLOCK_COMMENT = "comment.block.go"
DOUBLE_STRING = "string.quoted.double.go"
RAW_STRING = "string.quoted.raw.go"
RUNE = "constant.other.rune.go"
IMPORT = "entity.name.import.go"

SINGLE_IMPORT_PATTERN = re.compile(r"\bimport\s*(?:[\w.]+\s+)?$")
IMPORT_BLOCK_PATTERN = re.compile(r"\bimport\s*\(")
IMPORT_LINE_PATTERN = re.compile(r"^\s*(?:[\w.]+\s+)?$")

_QUOTES = {DOUBLE_STRING: '"', RUNE: "'", RAW_STRING: "`"}


def _construct_at(text: str, index: int) -> tuple[str | None, int]:
    """
    Find the comment or literal that text[index] belongs to.

    Opening and closing delimiters belong to their construct. Returns the
    construct's scope and start index, or (None, -1) for plain code.
    """
    state: str | None = None
    start = -1
    i = 0
    while i < len(text):
        char = text[i]
        width = 1
        owner = state

        if state is None:
            if text.startswith("//", i):
                state = owner = LINE_COMMENT
                start, width = i, 2
            elif text.startswith("/*", i):
                state = owner = BLOCK_COMMENT
                start, width = i, 2
            else:
                for scope, quote in _QUOTES.items():
                    if char == quote:
                        state = owner = scope
                        start = i
                        break
        elif state == LINE_COMMENT:
            if char == "\n":
                state = owner = None
        elif state == BLOCK_COMMENT:
            if text.startswith("*/", i):
                state, width = None, 2
        elif state == RAW_STRING:
            if char == "`":
                state = None
        else:
            if char == "\\":
                width = 2
            elif char == _QUOTES[state]:
                state = None
            elif char == "\n":
                state = owner = None

        if i <= index < i + width:
            return owner, start if owner else -1
        i += width

    return None, -1


def in_import(text: str, string_start: int) -> bool:
    """Check whether the literal starting at string_start is an import path."""
    before = text[:string_start]
    if SINGLE_IMPORT_PATTERN.search(before):
        return True

    block = None
    for block in IMPORT_BLOCK_PATTERN.finditer(before):
        pass
    if block is None or ")" in before[block.end():]:
        return False

    line = before[before.rfind("\n") + 1:]
    return bool(IMPORT_LINE_PATTERN.match(line))


def scope_descriptor(text: str, index: int) -> list[str]:
    """
    Scopes of the character at `index`, outermost first.

    For example the "m" in `import "fmt"` gives
    ["source.go", "entity.name.import.go", "string.quoted.double.go"].
    """
    scopes = [SOURCE]
    if index < 0 or index >= len(text):
        return scopes

    construct, start = _construct_at(text, index)
    if construct is None:
        return scopes

    if construct in (DOUBLE_STRING, RAW_STRING) and in_import(text, start):
        scopes.append(IMPORT)
    scopes.append(construct)
    return scopes


def selector_matches(selector: str, scopes: list[str]) -> bool:
    """
    Check a single scope selector such as ".comment.line" against scopes.

    A selector matches a scope when all of its dot separated classes
    appear in that scope.
    """
    classes = {c for c in selector.strip().split(".") if c}
    if not classes:
        return False
    return any(classes <= set(scope.split(".")) for scope in scopes)
