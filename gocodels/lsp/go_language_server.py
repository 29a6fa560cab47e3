from pygls.lsp.server import LanguageServer

from gocodels.completion.provider import GocodeProvider
from gocodels.config import GocodeSettings
from gocodels.go.packages import PackageIndex
from gocodels.gocode.client import GocodeClient
from gocodels.lsp.capabilities.capabilities import CapabilityManager


class GoLanguageServer(LanguageServer):
    """
    Custom Language Server with gocode-specific attributes.

    Attributes:
        settings: Current completion settings
        gocode_client: Runs gocode and the go tool
        package_index: Importable packages, for auto-import
        provider: The gocode completion provider
    """

    def __init__(self, name: str, version: str):
        super().__init__(name, version)

        self.settings: GocodeSettings = GocodeSettings()
        self.gocode_client: GocodeClient | None = None
        self.package_index: PackageIndex | None = None
        self.provider: GocodeProvider | None = None
        self.capability_manager: CapabilityManager | None = None
