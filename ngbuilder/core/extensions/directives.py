"""Comment directives: ``//# name("a.js", 'b.js')``."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterator

_ARGUMENT = re.compile(r"""(["'])(.*?)\1""")


@lru_cache(maxsize=8)
def directive_pattern(name: str, plural: bool = False) -> re.Pattern[str]:
    suffix = "s?" if plural else ""
    return re.compile(r"//#\s*" + re.escape(name) + suffix + r"\s*\((.*?)\)")


def iter_directive_args(
    source: str, name: str, plural: bool = False
) -> Iterator[tuple[str, str | None]]:
    """Yield ``(raw_argument, url)`` per argument; url is None when unquoted."""
    for m in directive_pattern(name, plural).finditer(source):
        for raw in re.split(r"\s*,\s*", m.group(1).strip()):
            if not raw:
                continue
            arg = _ARGUMENT.match(raw)
            yield raw, (arg.group(2) if arg else None)
