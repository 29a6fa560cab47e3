import asyncio
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


GOCODE_PACKAGE = "github.com/nsf/gocode"


@dataclass
class ExecResult:
    """Outcome of running an external Go tool."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class GocodeClient:
    """
    Locates and runs the Go toolchain binaries used by the server.

    Every command runs asynchronously so the language server keeps
    answering other requests while gocode works. Failures to spawn and
    timeouts come back as an ExecResult with a negative exit code; they
    never raise.
    """

    def __init__(
        self, env: Mapping[str, str] | None = None, timeout: float = 10.0
    ):
        """
        Initialize the client.

        Args:
            env: Environment for the spawned tools. Defaults to os.environ.
            timeout: Seconds to wait for a command before killing it.
        """
        self.env = dict(os.environ if env is None else env)
        self.timeout = timeout

        # Cache for resolved tool paths
        self._tools: dict[str, str] = {}

    def environment(self) -> dict[str, str]:
        """Environment passed to every spawned command."""
        return dict(self.env)

    def gopath(self) -> str:
        """GOPATH, falling back to the Go default of ~/go."""
        gopath = self.env.get("GOPATH", "").strip()
        if gopath:
            return gopath
        return str(Path.home() / "go")

    def _search_dirs(self) -> list[Path]:
        dirs: list[Path] = []
        gobin = self.env.get("GOBIN", "").strip()
        if gobin:
            dirs.append(Path(gobin))
        for entry in self.gopath().split(os.pathsep):
            if entry:
                dirs.append(Path(entry) / "bin")
        goroot = self.env.get("GOROOT", "").strip()
        if goroot:
            dirs.append(Path(goroot) / "bin")
        return dirs

    async def find_tool(self, name: str) -> str | None:
        """
        Resolve a tool name to an absolute executable path.

        Looks in GOBIN, each GOPATH bin directory and GOROOT/bin before
        falling back to PATH.

        Returns:
            Absolute path, or None when the tool is not installed
        """
        if name in self._tools:
            return self._tools[name]

        for directory in self._search_dirs():
            candidate = directory / name
            if candidate.is_file() and os.access(candidate, os.X_OK):
                self._tools[name] = str(candidate)
                return self._tools[name]

        found = shutil.which(name, path=self.env.get("PATH"))
        if found:
            self._tools[name] = found
        return found

    async def exec(
        self,
        cmd: str,
        args: list[str],
        input: str | None = None,
        cwd: Path | None = None,
    ) -> ExecResult:
        """
        Run a command and capture its output.

        Args:
            cmd: Executable path
            args: Command arguments
            input: Text fed to the process on stdin
            cwd: Working directory for the command

        Returns:
            ExecResult with decoded stdout and stderr
        """
        try:
            process = await asyncio.create_subprocess_exec(
                cmd,
                *args,
                stdin=asyncio.subprocess.PIPE if input is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=self.environment(),
            )
        except OSError as e:
            return ExecResult(exit_code=-1, stdout="", stderr=str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(
                    input=input.encode("utf-8") if input is not None else None
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return ExecResult(
                exit_code=-1,
                stdout="",
                stderr=f"{cmd} timed out after {self.timeout}s",
            )

        return ExecResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def set_option(self, name: str, value: bool) -> ExecResult | None:
        """Push a setting to the gocode daemon (`gocode set <name> <value>`)."""
        gocode = await self.find_tool("gocode")
        if not gocode:
            return None
        return await self.exec(gocode, ["set", name, "true" if value else "false"])

    async def update_gocode(self) -> list[ExecResult]:
        """Stop the gocode daemon and reinstall gocode from source."""
        results: list[ExecResult] = []

        gocode = await self.find_tool("gocode")
        if gocode:
            results.append(await self.exec(gocode, ["close"]))

        go = await self.find_tool("go")
        if go:
            results.append(await self.exec(go, ["get", "-u", GOCODE_PACKAGE]))
            # The binary may have moved
            self._tools.pop("gocode", None)

        return results
