"""
Basic tests for the Go Language Server.

These tests verify that the server can be created and has the expected features registered.
"""

from lsprotocol.types import (
    TEXT_DOCUMENT_COMPLETION,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
)

from gocodels.config import GocodeSettings
from gocodels.lsp.server import create_server


def test_server_creation():
    """Test that the server can be created successfully."""
    server = create_server()
    assert server is not None
    assert server.name == "gocodels"
    assert server.version == "0.1.0"


def test_server_starts_without_provider():
    """The provider is only built during initialize."""
    server = create_server()

    assert server.provider is None
    assert server.capability_manager is None
    assert server.settings == GocodeSettings()


def test_server_has_completion_feature():
    """Test that completion feature is registered."""
    server = create_server()

    assert TEXT_DOCUMENT_COMPLETION in server.protocol.fm._features


def test_completion_triggers_on_dot():
    server = create_server()

    options = server.protocol.fm.feature_options[TEXT_DOCUMENT_COMPLETION]
    assert options.trigger_characters == ["."]


def test_server_has_configuration_feature():
    server = create_server()

    assert WORKSPACE_DID_CHANGE_CONFIGURATION in server.protocol.fm._features
