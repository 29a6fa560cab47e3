"""
Snippet synthesis for func completions.

Snippets use the TextMate/LSP syntax: ${N:placeholder} tab-stops and $0
as the final cursor position. The display text mirrors the snippet without
any tab-stop markup or escaping.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from gocodels.gocode.types import Parameter, Signature


class SnippetMode(str, Enum):
    """How much of each argument ends up in a snippet placeholder."""

    NAME = "name"                   # identifier only, when there is one
    NAME_AND_TYPE = "nameAndType"   # full parameter text
    NONE = "none"                   # a single empty tab-stop

    @classmethod
    def parse(cls, value: object) -> SnippetMode | None:
        aliases = {
            "identifiers-only": cls.NAME,
            "full-names": cls.NAME_AND_TYPE,
        }
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class Snippet:
    snippet: str
    display_text: str


def escape_braces(text: str) -> str:
    """Stop "{}" from being read as an empty placeholder."""
    return text.replace("{}", "{\\}")


def _type_text(param: Parameter) -> str:
    if isinstance(param.type, Signature):
        return param.type.name
    return param.type


def return_label(signature: Signature) -> str:
    """Left label for a func suggestion: "T" or "(T1, T2)"."""
    if not signature.returns:
        return ""
    if len(signature.returns) == 1:
        return signature.returns[0].name
    return "(" + ", ".join(r.name for r in signature.returns) + ")"


class SnippetGenerator:
    """Builds call snippets from parsed func signatures."""

    def __init__(self, mode: SnippetMode = SnippetMode.NAME_AND_TYPE) -> None:
        self.mode = mode

    def generate(self, name: str, signature: Signature | None) -> Snippet:
        """
        Build the snippet and display text for calling `name`.

        Tab-stops are numbered in the order parameters appear, nested func
        parameters included. A trailing variadic parameter is shown in the
        display text but gets no placeholder.
        """
        result = Snippet(snippet=name + "(", display_text=name + "(")

        if signature is None:
            result.snippet += ")$0"
            result.display_text += ")"
            return result

        snip_count = 0
        last = len(signature.args) - 1
        for arg_count, arg in enumerate(signature.args):
            # omit variadic arguments
            generate_arg = not (
                arg_count == last
                and isinstance(arg.type, str)
                and arg.type.startswith("...")
            )

            if arg_count != 0:
                if generate_arg:
                    result.snippet += ", "
                result.display_text += ", "

            if arg.is_func:
                snip_count = self.func_snippet(result, snip_count, arg_count, arg)
                continue

            arg_text = arg.name
            if self.mode is SnippetMode.NAME and arg.identifier:
                arg_text = arg.identifier
            snip_count += 1
            if generate_arg:
                result.snippet += f"${{{snip_count}:{escape_braces(arg_text)}}}"
            result.display_text += arg.name

        result.snippet += ")$0"
        result.display_text += ")"

        if self.mode is SnippetMode.NONE:
            result.snippet = f"{name}($1)$0"

        return result

    def func_snippet(
        self, result: Snippet, snip_count: int, arg_count: int, param: Parameter
    ) -> int:
        """
        Append an anonymous func literal for a func-typed parameter.

        Returns the last tab-stop number used. Unnamed inner arguments are
        called argN after the outer argument's position.
        """
        snip_count += 1
        result.snippet += f"${{{snip_count}:func("
        result.display_text += "func("

        signature = param.type if isinstance(param.type, Signature) else Signature()

        for index, arg in enumerate(signature.args):
            if index != 0:
                result.snippet += ", "
                result.display_text += ", "

            snip_count += 1
            arg_text = arg.identifier or f"arg{arg_count}"
            result.snippet += f"${{{snip_count}:{arg_text}}} "
            result.display_text += arg_text + " "

            if arg.is_func:
                snip_count = self.func_snippet(result, snip_count, arg_count, arg)
            else:
                result.snippet += escape_braces(_type_text(arg))
                result.display_text += _type_text(arg)

        result.snippet += ")"
        result.display_text += ")"

        returns = signature.returns
        if len(returns) == 1:
            if returns[0].is_func:
                result.snippet += " "
                result.display_text += " "
                snip_count = self.func_snippet(result, snip_count, arg_count, returns[0])
            else:
                result.snippet += " " + escape_braces(_type_text(returns[0]))
                result.display_text += " " + returns[0].name
        elif returns:
            result.snippet += " ("
            result.display_text += " ("
            for index, item in enumerate(returns):
                if index != 0:
                    result.snippet += ", "
                    result.display_text += ", "
                result.snippet += escape_braces(_type_text(item))
                result.display_text += item.name
            result.snippet += ")"
            result.display_text += ")"

        # Body of the func literal
        snip_count += 1
        result.snippet += f" {{\n\t${snip_count}\n\\}}}}"
        return snip_count
