"""
Settings for the gocode completion provider.

Settings are merged from, lowest precedence first:
1. The defaults below
2. A `.gocodels.yml` file in the workspace root
3. LSP initializationOptions
4. workspace/didChangeConfiguration notifications

Keys use the camelCase names editors send (e.g. "snippetMode").
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from gocodels.completion.snippets import SnippetMode


SETTINGS_FILE = ".gocodels.yml"
SECTION = "gocodels"

DEFAULT_SUPPRESSED_CHARACTERS = [
    "comma", "newline", "space", "tab", "/", "\\", "(", ")", '"', "'", ":",
    ";", "<", ">", "~", "!", "@", "#", "$", "%", "^", "&", "*", "|", "+",
    "=", "[", "]", "{", "}", "`", "?", "-",
]


@dataclass
class GocodeSettings:
    """User-facing configuration of the completion provider."""

    # Ask gocode to propose builtin functions and types
    propose_builtins: bool = True

    # Ask gocode to propose packages that are not imported yet
    unimported_packages: bool = True

    # Comma separated scope selectors where completion is disabled
    scope_blacklist: str = ""

    # Characters (or comma/newline/space/tab) that do not start completion
    suppress_activation_for_characters: list[str] = field(
        default_factory=lambda: list(DEFAULT_SUPPRESSED_CHARACTERS)
    )

    snippet_mode: SnippetMode = SnippetMode.NAME_AND_TYPE

    # Seconds before a gocode invocation is abandoned
    gocode_timeout: float = 10.0

    def merge(self, data: Any) -> GocodeSettings:
        """
        Return a copy updated from a settings mapping.

        Unknown keys and values of the wrong type are ignored.
        """
        if not isinstance(data, dict):
            return self
        if isinstance(data.get(SECTION), dict):
            data = data[SECTION]

        changes: dict[str, Any] = {}

        for key, attr in (
            ("proposeBuiltins", "propose_builtins"),
            ("unimportedPackages", "unimported_packages"),
        ):
            if isinstance(data.get(key), bool):
                changes[attr] = data[key]

        if isinstance(data.get("scopeBlacklist"), str):
            changes["scope_blacklist"] = data["scopeBlacklist"]

        characters = data.get("suppressActivationForCharacters")
        if isinstance(characters, list):
            changes["suppress_activation_for_characters"] = [
                str(c) for c in characters if c is not None
            ]

        mode = SnippetMode.parse(data.get("snippetMode"))
        if mode is not None:
            changes["snippet_mode"] = mode

        timeout = data.get("gocodeTimeout")
        if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
            changes["gocode_timeout"] = float(timeout)

        return replace(self, **changes)


def load_settings_file(workspace_root: Path | None) -> dict[str, Any]:
    """
    Read `.gocodels.yml` from the workspace root.

    Returns an empty mapping when the file is missing or is not a YAML
    mapping.
    """
    if workspace_root is None:
        return {}

    settings_file = workspace_root / SETTINGS_FILE
    if not settings_file.is_file():
        return {}

    try:
        data = yaml.safe_load(settings_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}

    if not isinstance(data, dict):
        return {}
    return data


def load_settings(
    workspace_root: Path | None, initialization_options: Any = None
) -> GocodeSettings:
    """Build settings from defaults, the project file and init options."""
    settings = GocodeSettings()
    settings = settings.merge(load_settings_file(workspace_root))
    settings = settings.merge(initialization_options)
    return settings
