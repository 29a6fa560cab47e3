"""
gocode-backed LSP capabilities.

Provides completion for Go source files.
"""

import re

from lsprotocol.types import (
    CompletionContext,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionParams,
    CompletionTriggerKind,
    InsertTextFormat,
    Position,
    Range,
    TextEdit,
)

from gocodels.completion.provider import SuggestionRequest
from gocodels.gocode.types import Suggestion
from gocodels.lsp.capabilities.capabilities import CompletionCapability


# Word being typed, or the punctuation run right before the cursor
PREFIX_PATTERN = re.compile(r"(\w+[\w-]*|[.:;\[{(< ]+)$")

COMPLETION_KINDS = {
    "function": CompletionItemKind.Function,
    "import": CompletionItemKind.Module,
    "variable": CompletionItemKind.Variable,
    "type": CompletionItemKind.Class,
    "constant": CompletionItemKind.Constant,
    "value": CompletionItemKind.Value,
}


def completion_prefix(line_prefix: str) -> str:
    match = PREFIX_PATTERN.search(line_prefix)
    return match.group(1) if match else ""


def is_activated_manually(context: CompletionContext | None) -> bool:
    """Clients without completion context only ask on explicit invocation."""
    if context is None:
        return True
    return context.trigger_kind == CompletionTriggerKind.Invoked


def continues_previous(context: CompletionContext | None) -> bool:
    """Re-query of an incomplete list while the user keeps typing."""
    if context is None:
        return False
    return context.trigger_kind == CompletionTriggerKind.TriggerForIncompleteCompletions


def to_completion_item(suggestion: Suggestion, position: Position, rank: int) -> CompletionItem:
    start = Position(
        line=position.line,
        character=max(position.character - len(suggestion.replacement_prefix), 0),
    )

    if suggestion.snippet is not None:
        new_text = suggestion.snippet
        text_format = InsertTextFormat.Snippet
    else:
        new_text = suggestion.text or ""
        text_format = InsertTextFormat.PlainText

    return CompletionItem(
        label=suggestion.display_text or suggestion.text or "",
        kind=COMPLETION_KINDS.get(suggestion.type, CompletionItemKind.Value),
        detail=suggestion.left_label or None,
        filter_text=suggestion.fuzzy_match,
        sort_text=f"{rank:05d}",
        insert_text_format=text_format,
        text_edit=TextEdit(range=Range(start=start, end=position), new_text=new_text),
    )


class GocodeCompletionCapability(CompletionCapability):
    """Provides gocode completions with call snippets for funcs."""

    @property
    def name(self) -> str:
        return "gocode_completion"

    @property
    def description(self) -> str:
        return "Autocomplete Go identifiers, members and packages using gocode"

    async def can_handle(self, params: CompletionParams) -> bool:
        """Check if the document is Go source and gocode is set up."""
        if self.server.provider is None:
            return False
        return params.text_document.uri.endswith(".go")

    async def complete(self, params: CompletionParams) -> CompletionList:
        """Provide gocode completions at the cursor."""
        provider = self.server.provider
        if provider is None:
            return CompletionList(is_incomplete=False, items=[])

        doc = self.server.workspace.get_text_document(params.text_document.uri)
        position = params.position

        index = doc.offset_at_position(position)
        line_start = doc.source.rfind("\n", 0, index) + 1
        prefix = completion_prefix(doc.source[line_start:index])

        request = SuggestionRequest(
            document=doc,
            position=position,
            prefix=prefix,
            activated_manually=is_activated_manually(params.context),
            continues_previous=continues_previous(params.context),
        )
        suggestions = await provider.get_suggestions(request)

        items = [
            to_completion_item(suggestion, position, rank)
            for rank, suggestion in enumerate(suggestions)
        ]
        # Incomplete so that every keystroke comes back for refiltering
        return CompletionList(is_incomplete=True, items=items)
