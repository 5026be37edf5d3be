"""
Required scripts — include non-module scripts named by ``//# require(...)``.

Paths are relative to the referencing file. A required script's own
requirements are included before it, and each script only once.
"""

from __future__ import annotations

import logging

from ngbuilder.adapters.files import resolve_reference
from ngbuilder.core.extensions.base import Extension
from ngbuilder.core.extensions.directives import iter_directive_args
from ngbuilder.core.models.module import StandaloneFile

logger = logging.getLogger(__name__)


class RequiredScripts(Extension):

    name = "required_scripts"

    def __init__(self):
        self._seen: set[str] = set()
        self._scripts: list[StandaloneFile] = []

    def on_analyze(self, ctx) -> None:
        self._seen = {s.path for s in ctx.standalone_scripts}
        self._scripts = []

    def on_visit_module(self, ctx, module) -> None:
        logger.debug("Scanning %s for required scripts", module.name)
        for file in module.sources():
            self._scan(ctx, file.content, file.path)

    def _scan(self, ctx, source: str, path: str) -> None:
        for raw, url in iter_directive_args(source, "require"):
            if url is None:
                ctx.warn(f"Syntax error on require directive argument: {raw}", path=path)
                continue
            required = resolve_reference(path, url)
            if required in self._seen:
                continue
            self._seen.add(required)
            if ctx.read_file is None:
                ctx.warn(f"Required script '{required}' cannot be read.", path=path)
                continue
            try:
                content = ctx.read_file(required)
            except OSError:
                ctx.warn(f"Required script '{required}' not found.", path=path)
                continue
            self._scan(ctx, content, required)
            self._scripts.append(StandaloneFile(path=required, content=content))

    def on_emit(self, ctx, emitter) -> None:
        ctx.standalone_scripts.extend(self._scripts)
        if ctx.standalone_scripts:
            logger.info(
                "Standalone scripts: %s", ", ".join(s.path for s in ctx.standalone_scripts)
            )
