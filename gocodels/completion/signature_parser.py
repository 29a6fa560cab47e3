"""
Parser for the func type strings emitted by gocode.

gocode renders types the way `go/types` prints them, for example:

    func(a, b int) (c, d string)
    func(format string, a ...interface{}) (n int, err error)
    func(cb func(int) string) bool

The parser splits such a string into parameters and returns, descending
into nested func types. It is total: anything that does not look like a
func type comes back as a non-function Signature carrying the raw text.
"""

from __future__ import annotations

from gocodels.gocode.types import Parameter, Signature


FUNC_TOKEN = "func("
SEPARATOR = ", "

# Deeper nesting than this is treated as an opaque type
MAX_NESTING = 64


def match_paren(text: str, start: int) -> int | None:
    """
    Find the paren closing the one opened at text[start].

    Returns the index of the closing paren, or None when the parens
    never balance.
    """
    count = 0
    for i in range(start, len(text)):
        if text[i] == "(":
            count += 1
        elif text[i] == ")":
            count -= 1
            if count == 0:
                return i
    return None


def match_func(type_text: str) -> tuple[str | None, str | None, str | None]:
    """
    Split a func type into (type, args text, returns text).

    Tuple returns lose their surrounding parens. All three values are None
    when type_text is not a func type.
    """
    if not type_text or not type_text.startswith(FUNC_TOKEN):
        return None, None, None

    close = match_paren(type_text, len("func"))
    if close is None:
        return None, None, None

    args = type_text[len(FUNC_TOKEN):close]
    returns = None
    returns_start = close + len(") ")
    if len(type_text) > returns_start:
        if type_text[returns_start] == "(":
            returns = type_text[returns_start + 1:-1]
        else:
            returns = type_text[returns_start:]

    return type_text, args, returns


def parse_type(type_text: str, _depth: int = 0) -> Signature:
    """Parse a gocode type string into a Signature."""
    if not type_text or not type_text.strip():
        return Signature()

    if _depth > MAX_NESTING:
        return Signature(name=type_text)

    match, args, returns = match_func(type_text)
    if not match:
        return Signature(name=type_text)

    if not args and not returns:
        return Signature(is_func=True, name=type_text)

    return Signature(
        is_func=True,
        name=type_text,
        args=parse_parameters(args, _depth + 1) if args else [],
        returns=parse_parameters(returns, _depth + 1) if returns else [],
    )


def _next_separator(text: str) -> int | None:
    """Index of the first ", " outside any parens or brackets."""
    depth = 0
    for i, char in enumerate(text):
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        elif depth == 0 and text.startswith(SEPARATOR, i):
            return i
    return None


def ensure_next_arg(args: list[str]) -> list[str]:
    """
    Repair a naive ", " split so the first segment is a whole parameter.

    A split only goes wrong when the first segment holds a nested func type
    whose own parameter or return list contains commas. In that case the
    pending segments are joined back together and split again at the first
    separator that is not nested inside parens.
    """
    if not args:
        return []

    if FUNC_TOKEN not in args[0]:
        return args

    joined = SEPARATOR.join(args)
    split_at = _next_separator(joined)
    if split_at is None:
        return [joined.strip()]

    rest = joined[split_at + len(SEPARATOR):]
    return [joined[:split_at].strip()] + rest.split(SEPARATOR)


def _func_parameter(
    name: str, identifier: str, type_text: str, depth: int
) -> Parameter:
    signature = parse_type(type_text, depth)
    if not signature.is_func:
        return Parameter(name=name, identifier=identifier, type=type_text)
    return Parameter(name=name, identifier=identifier, is_func=True, type=signature)


def parse_parameters(text: str, _depth: int = 0) -> list[Parameter]:
    """
    Parse a comma separated parameter (or return) list.

    Grouped identifiers are kept as gocode prints them: "a, b int" gives
    the two parameters "a" and "b int".
    """
    if not text or not text.strip():
        return []

    args = text.split(SEPARATOR)
    result: list[Parameter] = []
    while True:
        args = ensure_next_arg(args)
        if not args:
            break
        arg = args.pop(0)

        if arg.startswith(FUNC_TOKEN):
            result.append(_func_parameter(arg, "", arg, _depth))
            continue

        if " " not in arg:
            result.append(Parameter(name=arg, type=arg))
            continue

        identifier, _, type_text = arg.partition(" ")
        if type_text.startswith(FUNC_TOKEN):
            result.append(_func_parameter(arg, identifier, type_text, _depth))
        else:
            result.append(Parameter(name=arg, identifier=identifier, type=type_text))

    return result
