from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


PANIC = "PANIC"


@dataclass
class Parameter:
    """A single parameter or return value of a parsed func type."""

    # Full original text segment (e.g. "cb func(int) string")
    name: str

    # Empty when the parameter is unnamed
    identifier: str = ""

    is_func: bool = False

    # Plain type text, or a nested Signature when is_func is set
    type: str | Signature = ""


@dataclass
class Signature:
    """
    Structured form of a gocode type string.

    Non-function types are represented with is_func=False and empty
    args/returns; name always carries the original type text.
    """

    is_func: bool = False
    name: str = ""
    args: list[Parameter] = field(default_factory=list)
    returns: list[Parameter] = field(default_factory=list)


@dataclass
class RawCandidate:
    """One candidate as emitted by `gocode -f=json autocomplete`."""

    cls: str  # "func", "package", "var", "type", "const" or "PANIC"
    name: str
    type: str = ""

    @classmethod
    def from_json(cls, data: Any) -> RawCandidate:
        if not isinstance(data, dict):
            return cls(cls="", name=str(data or ""))
        return cls(
            cls=str(data.get("class") or ""),
            name=str(data.get("name") or ""),
            type=str(data.get("type") or ""),
        )

    @property
    def is_panic(self) -> bool:
        return self.cls == PANIC and self.type == PANIC and self.name == PANIC


@dataclass
class Suggestion:
    """A completion item produced by the gocode provider."""

    replacement_prefix: str = ""
    left_label: str = ""

    # function, import, variable, type, constant or value
    type: str = "value"

    text: str | None = None
    snippet: str | None = None
    display_text: str | None = None

    # Key used when refiltering cached suggestions
    fuzzy_match: str | None = None
