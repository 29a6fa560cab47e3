from pathlib import Path

from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_COMPLETION,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DidChangeConfigurationParams,
    InitializeParams,
    LogMessageParams,
    MessageType,
)
from pygls.uris import to_fs_path

from gocodels.completion.provider import TRIGGER_CHARACTER, GocodeProvider
from gocodels.config import load_settings
from gocodels.go.packages import PackageIndex
from gocodels.gocode.client import GocodeClient
from gocodels.lsp.capabilities.capabilities import CapabilityManager
from gocodels.lsp.go_language_server import GoLanguageServer


def create_server() -> GoLanguageServer:
    """
    Creates and returns a configured Language Server instance.

    The LanguageServer class from pygls handles:
    - JSON-RPC communication with clients (editors)
    - Request/response lifecycle
    - Notifications and event handling
    """
    server = GoLanguageServer("gocodels", "0.1.0")

    @server.feature(INITIALIZE)
    async def initialize(ls: GoLanguageServer, params: InitializeParams):
        """
        Initialize the server and set up any necessary state.
        """
        workspace_root = None
        if params.root_uri:
            fs_path = to_fs_path(params.root_uri)
            if fs_path:
                workspace_root = Path(fs_path)

        ls.settings = load_settings(workspace_root, params.initialization_options)

        ls.gocode_client = GocodeClient(timeout=ls.settings.gocode_timeout)
        ls.package_index = PackageIndex(ls.gocode_client, server=ls)
        ls.provider = GocodeProvider(
            ls.gocode_client, ls.package_index, settings=ls.settings, server=ls
        )

        gocode = await ls.gocode_client.find_tool("gocode")
        if gocode is None:
            ls.window_log_message(
                LogMessageParams(
                    MessageType.Warning,
                    "gocode not found; install it with `go get -u github.com/nsf/gocode`",
                )
            )
        else:
            ls.window_log_message(
                LogMessageParams(MessageType.Info, f"Using gocode at {gocode}")
            )
            await ls.provider.toggle_gocode_config()

        # Initialize capability manager
        ls.capability_manager = CapabilityManager(ls)

    @server.feature(
        TEXT_DOCUMENT_COMPLETION,
        CompletionOptions(trigger_characters=[TRIGGER_CHARACTER]),
    )
    async def completion(ls: GoLanguageServer, params: CompletionParams):
        if ls.capability_manager:
            return await ls.capability_manager.handle_completion(params)
        return CompletionList(is_incomplete=False, items=[])

    @server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
    async def did_change_configuration(
        ls: GoLanguageServer, params: DidChangeConfigurationParams
    ):
        """Apply changed settings and push them to gocode."""
        ls.settings = ls.settings.merge(params.settings)
        if ls.provider:
            ls.provider.apply_settings(ls.settings)
            await ls.provider.toggle_gocode_config()

    return server
