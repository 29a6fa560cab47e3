"""
Auto-import for member access on packages that are not imported yet.

When `http.` yields no completions, the buffer is copied with an import
of the matching package added, and gocode is asked again against that
copy. The editor's buffer itself is never modified.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from gocodels.go.packages import PackageIndex, split_gopath


IDENTIFIER_PATTERN = re.compile(r"([A-Za-z_]\w*)$")
IMPORT_BLOCK_PATTERN = re.compile(r"^import\s*\(", re.MULTILINE)
PACKAGE_CLAUSE_PATTERN = re.compile(r"^package\s+\w+[^\n]*", re.MULTILINE)

VENDOR_SEGMENT = "/vendor/"


@dataclass
class AddedImport:
    """Buffer text with an import inserted, and the shifted cursor offset."""

    text: str
    offset: int


def wanted_package(text: str, index: int) -> str | None:
    """
    Identifier right before the "." that ends at `index`.

    For "fmt.|" (cursor at |) this is "fmt".
    """
    if index <= 0 or text[index - 1] != ".":
        return None
    line_start = text.rfind("\n", 0, index - 1) + 1
    match = IDENTIFIER_PATTERN.search(text, line_start, index - 1)
    if not match:
        return None
    return match.group(1)


def _is_under(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def get_package(
    file_path: str | Path, gopath: str, candidates: list[str], use_vendor: bool
) -> str | None:
    """
    Pick the import path to use from the file's point of view.

    A vendored candidate "<root>/vendor/<path>" is importable as "<path>",
    but only with vendoring enabled and from files under
    <GOPATH>/src/<root>. Usable vendored candidates win over the rest;
    otherwise the first non-vendored candidate is returned.
    """
    file_path = Path(file_path)

    if use_vendor:
        for candidate in candidates:
            if VENDOR_SEGMENT not in candidate:
                continue
            root, _, vendored = candidate.rpartition(VENDOR_SEGMENT)
            for entry in split_gopath(gopath):
                if _is_under(file_path, Path(entry) / "src" / root):
                    return vendored

    for candidate in candidates:
        if VENDOR_SEGMENT in candidate or candidate.startswith("vendor/"):
            continue
        return candidate

    return None


def add_import(text: str, import_path: str, offset: int) -> AddedImport | None:
    """
    Insert an import of `import_path` into a copy of `text`.

    The import joins the first `import (` block when there is one, and
    otherwise goes right after the package clause.

    Args:
        text: Buffer contents
        import_path: Import path to add
        offset: Cursor position as a UTF-8 byte offset into `text`

    Returns:
        AddedImport, or None when the buffer has no package clause
    """
    quoted = f'"{import_path}"'

    block = IMPORT_BLOCK_PATTERN.search(text)
    if block:
        insert_at = block.end()
        insertion = f"\n\t{quoted}"
    else:
        clause = PACKAGE_CLAUSE_PATTERN.search(text)
        if not clause:
            return None
        insert_at = clause.end()
        insertion = f"\n\nimport {quoted}"

    new_text = text[:insert_at] + insertion + text[insert_at:]
    if len(text[:insert_at].encode("utf-8")) <= offset:
        offset += len(insertion.encode("utf-8"))

    return AddedImport(text=new_text, offset=offset)


class ImportResolver:
    """Synthesizes a buffer that imports the package a member access names."""

    def __init__(self, packages: PackageIndex) -> None:
        self.packages = packages

    async def resolve(
        self, text: str, index: int, offset: int, file_path: str | Path
    ) -> AddedImport | None:
        """
        Build the patched buffer for a failed `pkg.` completion.

        Args:
            text: Buffer contents
            index: Cursor position as a character index into `text`
            offset: Cursor position as a UTF-8 byte offset into `text`
            file_path: Path of the file being edited

        Returns:
            AddedImport, or None when no import can be synthesized
        """
        use_vendor = await self.packages.is_vendor_supported()
        pkg = wanted_package(text, index)
        if not pkg:
            return None

        all_packages = await self.packages.all_packages()
        candidates = all_packages.get(pkg)
        if not candidates:
            return None

        import_path = get_package(file_path, self.packages.gopath(), candidates, use_vendor)
        if not import_path:
            return None

        return add_import(text, import_path, offset)
