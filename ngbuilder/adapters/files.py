"""
File adapter — source discovery, reading and artifact writing.

Paths handed to the builder are POSIX-style and relative to the project
root (the directory holding ngbuilder.yml); they double as the file
identifiers that appear in diagnostics and debug builds.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")


def _is_glob(pattern: str) -> bool:
    return any(ch in _GLOB_CHARS for ch in pattern)


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _expand(root: Path, pattern: str) -> list[str]:
    return sorted(
        _relative(p, root) for p in root.glob(pattern) if p.is_file()
    )


def sort_files_before_subfolders(paths: list[str]) -> list[str]:
    """Sort paths so each directory's files come before its subdirectories.

    >>> sort_files_before_subfolders(["a/b/c.js", "a/z.js", "a.js"])
    ['a.js', 'a/z.js', 'a/b/c.js']
    """

    def key(path: str) -> tuple:
        parts = PurePosixPath(path).parts
        return tuple((1, p) for p in parts[:-1]) + ((0, parts[-1]),)

    return sorted(paths, key=key)


def discover_sources(root: Path, patterns: list[str]) -> tuple[list[str], list[str]]:
    """Expand ``src`` patterns into file paths.

    Patterns are glob expressions (``**`` recurses) relative to ``root``;
    a leading ``!`` removes matches of earlier patterns. Literal paths
    that do not exist are returned separately so they can be reported.

    Returns:
        (found, missing)
    """
    found: dict[str, None] = {}
    missing: list[str] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            for path in _expand(root, pattern[1:]):
                found.pop(path, None)
            continue
        if _is_glob(pattern):
            matches = _expand(root, pattern)
            if not matches:
                logger.debug("Pattern %s matched no files", pattern)
            for path in matches:
                found.setdefault(path, None)
        elif (root / pattern).is_file():
            found.setdefault(PurePosixPath(pattern).as_posix(), None)
        else:
            missing.append(pattern)
    return sort_files_before_subfolders(list(found)), missing


def path_matches(path: str, patterns: list[str]) -> bool:
    """Whether ``path`` matches any pattern.

    Patterns without a slash are matched against the file name only,
    so ``*.lib.js`` matches ``vendor/x/jquery.lib.js``.
    """
    name = PurePosixPath(path).name
    for pattern in patterns:
        if "/" in pattern:
            if fnmatch.fnmatchcase(path, pattern):
                return True
        elif fnmatch.fnmatchcase(name, pattern):
            return True
    return False


def read_source(path: Path) -> str:
    """Read a script as text (UTF-8, BOM tolerated)."""
    return path.read_text(encoding="utf-8-sig")


def resolve_reference(referrer: str, reference: str) -> str:
    """Resolve ``reference`` relative to the directory of ``referrer``."""
    base = PurePosixPath(referrer).parent
    parts: list[str] = []
    for part in (base / reference).parts:
        if part == "..":
            if parts and parts[-1] != "..":
                parts.pop()
            else:
                parts.append(part)
        elif part != ".":
            parts.append(part)
    return "/".join(parts)


class OutputWriter:
    """Writes build artifacts.

    The first write to a destination during the writer's lifetime
    replaces the file; later writes to the same destination append.
    """

    def __init__(self):
        self._written: set[Path] = set()

    def write(self, path: Path, content: str) -> int:
        """Write ``content`` and return the number of bytes written."""
        path = path.resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8")
        if path in self._written:
            with path.open("ab") as f:
                f.write(b"\n" + data)
            logger.info("Appended %d bytes to %s", len(data), path)
        else:
            path.write_bytes(data)
            self._written.add(path)
            logger.info("Wrote %d bytes to %s", len(data), path)
        return len(data)
