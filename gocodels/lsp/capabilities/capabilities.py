"""
LSP Capabilities Manager

This module manages LSP feature handlers using a plugin architecture.
Each capability decides for itself whether it can serve a request, and
the manager aggregates the results of all capable handlers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from lsprotocol.types import (
    CompletionList,
    CompletionParams,
    LogMessageParams,
    MessageType,
)


if TYPE_CHECKING:
    from gocodels.lsp.go_language_server import GoLanguageServer


class Capability(ABC):
    """
    Base class for all LSP capability handlers.

    Each capability can handle one or more LSP features and decides
    whether it can handle a specific request based on context.
    """

    def __init__(self, server: GoLanguageServer) -> None:
        self.server = server

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this capability."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this capability does."""
        pass

    @abstractmethod
    async def can_handle(self, params) -> bool:
        """Check if the capability can handle the request."""
        pass


class CompletionCapability(Capability):
    """Base class for completion capabilities."""

    @abstractmethod
    async def can_handle(self, params: CompletionParams) -> bool:
        """
        Check if this capability can handle the completion request.

        Returns True if this capability should provide completions
        for the current context.
        """
        pass

    @abstractmethod
    async def complete(self, params: CompletionParams) -> CompletionList:
        """
        Provide completion items.

        Only called if can_handle() returns True.
        """
        pass


class CapabilityManager:
    """
    Central manager for all LSP capabilities.

    Usage:
        # In server initialization
        manager = CapabilityManager(server)
    """

    def __init__(
        self,
        server: GoLanguageServer,
        capabilities: dict[str, Capability] | None = None,
    ):
        self.server = server

        # Default capabilities
        if capabilities is None:
            from gocodels.lsp.capabilities.gocode_capabilities import (
                GocodeCompletionCapability,
            )

            capabilities = {
                "gocode_completion": GocodeCompletionCapability(server),
            }

        self.capabilities = capabilities

    def get_capability(self, name: str) -> Capability | None:
        """Get a specific capability by name"""
        return self.capabilities.get(name)

    def get_capabilities_by_type(self, capability_type: type) -> list[Capability]:
        """Get all capabilities of a specific type (e.g., all CompletionCapability)."""
        return [
            cap
            for cap in self.capabilities.values()
            if isinstance(cap, capability_type)
        ]

    async def handle_completion(self, params: CompletionParams) -> CompletionList:
        """
        Handle completion requests by delegating to capable handlers.

        The list is incomplete when any handler says so, which makes the
        client ask again on the next keystroke.
        """
        all_items = []
        is_incomplete = False

        for capability in self.get_capabilities_by_type(CompletionCapability):
            try:
                if await capability.can_handle(params):
                    result = await capability.complete(params)  # pyright: ignore
                    all_items.extend(result.items)
                    is_incomplete = is_incomplete or result.is_incomplete
            except Exception as e:
                self.server.window_log_message(
                    LogMessageParams(
                        type=MessageType.Error,
                        message=f"Completion error in {capability.name}: {e}"
                    )
                )

        return CompletionList(is_incomplete=is_incomplete, items=all_items)
