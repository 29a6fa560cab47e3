"""
Index of importable Go packages, keyed by package short name.

Built once from `go list` and kept in memory for the life of the server.
"""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

from lsprotocol.types import LogMessageParams, MessageType

from gocodels.gocode.client import GocodeClient

if TYPE_CHECKING:
    from gocodels.lsp.go_language_server import GoLanguageServer


GO_VERSION_PATTERN = re.compile(r"go(\d+)\.(\d+)")


def package_name(import_path: str) -> str:
    """Short name a package is referenced by ("net/http" -> "http")."""
    return import_path.rstrip("/").rsplit("/", 1)[-1]


def is_internal(import_path: str) -> bool:
    return "internal" in import_path.split("/")


class PackageIndex:
    """
    Maps short package identifiers to candidate import paths.

    Usage:
        index = PackageIndex(client)
        packages = await index.all_packages()
        packages.get("http")  # ["net/http", ...]
    """

    def __init__(
        self, client: GocodeClient, server: GoLanguageServer | None = None
    ) -> None:
        self.client = client
        self.server = server

        self._packages: dict[str, list[str]] | None = None
        self._vendor_supported: bool | None = None

    def gopath(self) -> str:
        return self.client.gopath()

    async def all_packages(self) -> dict[str, list[str]]:
        """
        Get every importable package grouped by short name.

        Shorter import paths come first, so the standard library wins over
        a third party package of the same name.
        """
        if self._packages is not None:
            return self._packages

        go = await self.client.find_tool("go")
        if not go:
            return {}

        result = await self.client.exec(
            go, ["list", "-e", "-f", "{{.ImportPath}}", "all"]
        )
        if result.stderr.strip() and self.server:
            self.server.window_log_message(
                LogMessageParams(
                    type=MessageType.Warning,
                    message=f"go list: {result.stderr.strip()}",
                )
            )

        packages = self.build_index(result.stdout.splitlines())
        # Failed or timed out listings are retried on the next lookup
        if result.ok:
            self._packages = packages
        return packages

    @staticmethod
    def build_index(import_paths: list[str]) -> dict[str, list[str]]:
        packages: dict[str, list[str]] = {}
        for line in import_paths:
            import_path = line.strip()
            if not import_path or is_internal(import_path):
                continue
            name = package_name(import_path)
            paths = packages.setdefault(name, [])
            if import_path not in paths:
                paths.append(import_path)

        for paths in packages.values():
            paths.sort(key=lambda p: (p.count("/"), p))

        return packages

    async def is_vendor_supported(self) -> bool:
        """
        Check whether the Go toolchain honors vendor directories.

        Go 1.6 and later always do; Go 1.5 only with
        GO15VENDOREXPERIMENT=1.
        """
        if self._vendor_supported is not None:
            return self._vendor_supported

        go = await self.client.find_tool("go")
        if not go:
            return False

        result = await self.client.exec(go, ["version"])
        if not result.ok:
            return False

        match = GO_VERSION_PATTERN.search(result.stdout)
        if not match:
            # Development builds report "devel"
            self._vendor_supported = "devel" in result.stdout
            return self._vendor_supported

        major, minor = int(match.group(1)), int(match.group(2))
        if (major, minor) >= (1, 6):
            self._vendor_supported = True
        elif (major, minor) == (1, 5):
            env = self.client.environment()
            self._vendor_supported = env.get("GO15VENDOREXPERIMENT") == "1"
        else:
            self._vendor_supported = False

        return self._vendor_supported


def split_gopath(gopath: str) -> list[str]:
    return [entry for entry in gopath.split(os.pathsep) if entry]
