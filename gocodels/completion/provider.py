"""
gocode completion provider.

Decides per request whether to ask gocode for fresh candidates or to
fuzzy filter the previous ones, runs gocode, and turns its raw candidates
into suggestions, synthesizing call snippets for funcs.

Cached suggestions are refiltered only while the client keeps typing the
same word (a request that continues the previous one); any other request,
and every "." trigger, asks gocode again. The cache is shared by all
requests and the last request to finish wins it.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Sequence

from lsprotocol.types import (
    LogMessageParams,
    MessageActionItem,
    MessageType,
    Position,
    ShowMessageParams,
    ShowMessageRequestParams,
)
from pygls.workspace.text_document import TextDocument

from gocodels.completion.fuzzy import fuzzy_filter
from gocodels.completion.imports import ImportResolver
from gocodels.completion.signature_parser import FUNC_TOKEN, parse_type
from gocodels.completion.snippets import SnippetGenerator, return_label
from gocodels.config import GocodeSettings
from gocodels.go.packages import PackageIndex
from gocodels.gocode.client import GocodeClient
from gocodels.gocode.types import RawCandidate, Suggestion
from gocodels.lsp.scopes import IMPORT, scope_descriptor, selector_matches

if TYPE_CHECKING:
    from gocodels.lsp.go_language_server import GoLanguageServer


TRIGGER_CHARACTER = "."

CHARACTER_NAMES = {
    "comma": ",",
    "newline": "\n",
    "space": " ",
    "tab": "\t",
}

SUGGESTION_TYPES = {
    "func": "function",
    "package": "import",
    "var": "variable",
    "type": "type",
    "const": "constant",
}

PANIC_MESSAGE = (
    "gocode is panicking. This often happens when you install a new Go "
    "version, or when you are running an out of date version of gocode. "
    "Often, running `gocode close && go get -u github.com/nsf/gocode` is "
    "able to fix the issue. Would you like to try running it now?"
)
UPDATE_ACTION = "Yes"
DISMISS_ACTION = "Not Now"

FuzzyFilter = Callable[[Sequence[Suggestion], str, str], list[Suggestion]]


@dataclass
class SuggestionRequest:
    """A completion request as seen by the provider."""

    document: TextDocument
    position: Position

    # Word fragment before the cursor, or "." right after a member access
    prefix: str

    activated_manually: bool = False

    # Typing continued the word the cached suggestions were fetched for
    continues_previous: bool = False


def translate_type(cls: str) -> str:
    return SUGGESTION_TYPES.get(cls, "value")


def parse_suppressed_characters(values: Sequence[str]) -> list[str]:
    """Turn configured names (comma, space, ...) into the characters."""
    characters = []
    for value in values:
        char = value.strip() if value else ""
        char = CHARACTER_NAMES.get(char.lower(), char)
        if char:
            characters.append(char)
    return characters


class GocodeProvider:
    """
    Completion provider backed by gocode.

    Attributes:
        current_suggestions: Suggestions of the last fresh query
        panicked: Set once gocode reported a panic; never reset
    """

    def __init__(
        self,
        client: GocodeClient,
        packages: PackageIndex,
        settings: GocodeSettings | None = None,
        server: GoLanguageServer | None = None,
        fuzzy: FuzzyFilter = fuzzy_filter,
    ) -> None:
        self.client = client
        self.server = server
        self.fuzzy = fuzzy
        self.import_resolver = ImportResolver(packages)

        self.current_suggestions: list[Suggestion] = []
        self.subscribers: list[Callable[[list[Suggestion]], None]] = []
        self.panicked = False
        self._tasks: set[asyncio.Task] = set()

        self.apply_settings(settings or GocodeSettings())

    def apply_settings(self, settings: GocodeSettings) -> None:
        self.settings = settings
        self.propose_builtins = settings.propose_builtins
        self.unimported_packages = settings.unimported_packages
        self.suppress_for_characters = parse_suppressed_characters(
            settings.suppress_activation_for_characters
        )
        self.snippets = SnippetGenerator(settings.snippet_mode)
        self.client.timeout = settings.gocode_timeout
        self.filter_selectors(settings.scope_blacklist)

    def filter_selectors(self, scope_blacklist: str) -> None:
        """
        Split the scope block-list into disabled selectors.

        Quoted string selectors are not disabled outright; they switch on
        the import-aware string suppression instead.
        """
        self.should_suppress_string_quoted = False
        self.disable_for_selectors: list[str] = []
        for selector in (scope_blacklist or "").split(","):
            selector = selector.strip()
            if not selector:
                continue
            if ".string.quoted" in selector:
                self.should_suppress_string_quoted = True
            else:
                self.disable_for_selectors.append(selector)

    async def toggle_gocode_config(self) -> None:
        """Push propose-builtins and unimported-packages to gocode."""
        for name, value in (
            ("unimported-packages", self.unimported_packages),
            ("propose-builtins", self.propose_builtins),
        ):
            result = await self.client.set_option(name, value)
            if result is None:
                return
            if result.stderr.strip():
                self._log(f"gocode set {name}: {result.stderr.strip()}")

    def dispose(self) -> None:
        self.subscribers = []
        self.current_suggestions = []
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    def on_did_get_suggestions(
        self, callback: Callable[[list[Suggestion]], None]
    ) -> None:
        self.subscribers.append(callback)

    def _notify_subscribers(self, suggestions: list[Suggestion]) -> list[Suggestion]:
        for subscriber in self.subscribers:
            subscriber(suggestions)
        return suggestions

    def character_is_suppressed(self, char: str, scopes: Sequence[str]) -> bool:
        """
        Check whether typing `char` should not start a completion.

        Import paths are never suppressed. When quoted strings are
        block-listed, a string suppresses unless it is an import path.
        """
        for scope in scopes:
            if scope == IMPORT:
                return False
            if self.should_suppress_string_quoted and scope.startswith("string.quoted"):
                return IMPORT not in scopes
        return char in self.suppress_for_characters

    def scope_is_disabled(self, scopes: Sequence[str]) -> bool:
        return any(
            selector_matches(selector, list(scopes))
            for selector in self.disable_for_selectors
        )

    def is_suppressed(self, request: SuggestionRequest) -> bool:
        """Check the block-lists against the character before the cursor."""
        document = request.document
        text = document.source
        index = document.offset_at_position(request.position)
        if index <= 0:
            return False

        scopes = scope_descriptor(text, index - 1)
        if self.scope_is_disabled(scopes):
            return True
        if request.activated_manually:
            return False
        return self.character_is_suppressed(text[index - 1], scopes)

    async def get_suggestions(self, request: SuggestionRequest) -> list[Suggestion]:
        """
        Get suggestions for a completion request.

        Returns:
            Suggestions, possibly empty; never raises for gocode failures
        """
        prefix = request.prefix.strip()
        if prefix == "" and not request.activated_manually:
            self.current_suggestions = []
            return self._notify_subscribers([])

        if self.is_suppressed(request):
            return self._notify_subscribers([])

        if (
            request.continues_previous
            and prefix
            and prefix != TRIGGER_CHARACTER
            and self.current_suggestions
        ):
            matches = self.fuzzy(self.current_suggestions, prefix, "fuzzy_match")
            return self._notify_subscribers(
                [replace(s, replacement_prefix=prefix) for s in matches]
            )

        suggestions = await self._query(request, prefix)
        return self._notify_subscribers(suggestions)

    async def _query(self, request: SuggestionRequest, prefix: str) -> list[Suggestion]:
        """Fetch a fresh set of suggestions from gocode."""
        cmd = await self.client.find_tool("gocode")
        if not cmd:
            self._log("gocode not found", MessageType.Info)
            return []

        document, position = request.document, request.position
        text = document.source
        index = document.offset_at_position(position)
        offset = len(text[:index].encode("utf-8"))
        file_path = document.path

        raw = await self.execute_gocode(
            cmd, ["-f=json", "autocomplete", file_path, str(offset)], text, file_path
        )

        if not raw and prefix == TRIGGER_CHARACTER:
            raw = await self._retry_with_import(cmd, text, index, offset, file_path)

        suggestions: list[Suggestion] = []
        if raw:
            suggestions = self.map_messages(raw, text, index)

        self.current_suggestions = suggestions
        return suggestions

    async def _retry_with_import(
        self, cmd: str, text: str, index: int, offset: int, file_path: str
    ) -> list[Any]:
        """Query again against a copy of the buffer importing the package."""
        try:
            added = await self.import_resolver.resolve(text, index, offset, file_path)
        except Exception as e:
            self._log(f"Failed to resolve import: {e}")
            return []

        if added is None:
            return []

        return await self.execute_gocode(
            cmd,
            ["-f=json", "autocomplete", file_path, str(added.offset)],
            added.text,
            file_path,
        )

    async def execute_gocode(
        self, cmd: str, args: list[str], text: str, file_path: str
    ) -> list[Any]:
        """
        Run gocode with the buffer on stdin and decode its JSON output.

        Returns:
            The decoded `[prefix_length, candidates]` pair, or [] on failure
        """
        result = await self.client.exec(
            cmd, args, input=text, cwd=Path(file_path).parent
        )

        if result.stderr.strip():
            self._log(f"Failed to run gocode: {result.stderr.strip()}")

        data = result.stdout
        if not data.strip():
            return []

        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as e:
            self._log(f"Failed to parse the output of gocode: {e}", MessageType.Error)
            if self.server:
                self.server.window_show_message(
                    ShowMessageParams(
                        type=MessageType.Error, message=f"gocode error: {data}"
                    )
                )
            return []

        if not isinstance(parsed, list):
            return []
        return parsed

    def map_messages(self, res: list[Any], text: str, index: int) -> list[Suggestion]:
        """
        Turn gocode's `[prefix_length, candidates]` into suggestions.

        Args:
            res: Decoded gocode output
            text: Buffer contents
            index: Cursor position as a character index into `text`
        """
        if len(res) < 2 or not isinstance(res[1], list) or not res[1]:
            return []

        candidates = [RawCandidate.from_json(c) for c in res[1]]
        if candidates[0].is_panic:
            self.bounce_gocode()

        num_prefix = res[0] if isinstance(res[0], int) else 0
        line_start = text.rfind("\n", 0, index) + 1
        prefix = text[max(index - num_prefix, line_start):index]
        suffix = text[index:index + 1]

        suggestions = []
        for c in candidates:
            if c.is_panic:
                continue

            suggestion = Suggestion(
                replacement_prefix=prefix,
                left_label=c.type or c.cls,
                type=translate_type(c.cls),
            )
            if c.cls == "func" and suffix != "(":
                suggestion = self.upgrade_suggestion(suggestion, c)
            else:
                suggestion.text = c.name
                suggestion.fuzzy_match = c.name
            suggestions.append(suggestion)

        return suggestions

    def upgrade_suggestion(self, suggestion: Suggestion, c: RawCandidate) -> Suggestion:
        """Turn a func candidate into a call snippet."""
        if not c.type or FUNC_TOKEN not in c.type:
            return replace(suggestion, text=c.name, fuzzy_match=c.name)

        signature = parse_type(c.type)
        if not signature.is_func:
            return replace(suggestion, text=c.name, fuzzy_match=c.name, left_label="")

        res = self.snippets.generate(c.name, signature)
        return replace(
            suggestion,
            left_label=return_label(signature),
            snippet=res.snippet,
            display_text=res.display_text,
            fuzzy_match=c.name,
        )

    def bounce_gocode(self) -> None:
        """Offer to update gocode, once per provider."""
        if self.panicked:
            return

        self.panicked = True
        self._log("gocode is panicking", MessageType.Error)
        if not self.server:
            return

        task = asyncio.ensure_future(self._offer_gocode_update())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _offer_gocode_update(self) -> None:
        if not self.server:
            return
        try:
            choice = await self.server.window_show_message_request_async(
                ShowMessageRequestParams(
                    type=MessageType.Error,
                    message=PANIC_MESSAGE,
                    actions=[
                        MessageActionItem(title=UPDATE_ACTION),
                        MessageActionItem(title=DISMISS_ACTION),
                    ],
                )
            )
            if choice is None or choice.title != UPDATE_ACTION:
                return

            for result in await self.client.update_gocode():
                if not result.ok:
                    self._log(f"Failed to update gocode: {result.stderr.strip()}")
        except Exception as e:
            self._log(f"Failed to update gocode: {e}", MessageType.Error)

    def _log(self, message: str, type: MessageType = MessageType.Warning) -> None:
        if self.server:
            self.server.window_log_message(
                LogMessageParams(type=type, message=message)
            )
