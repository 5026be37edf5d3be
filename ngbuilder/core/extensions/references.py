"""
Reference exporter — collect stylesheet and template paths.

Sources may name the assets they need in comment directives::

    //# stylesheet("widget.css")
    //# templates('a.html', 'b.html')

The resolved paths (relative to the referencing file, in visit order,
without repeats) are exported for the caller to copy or link.
"""

from __future__ import annotations

from ngbuilder.adapters.files import resolve_reference
from ngbuilder.core.extensions.base import Extension
from ngbuilder.core.extensions.directives import iter_directive_args

DEFAULT_DIRECTIVES = {
    "stylesheet": "required_stylesheets",
    "template": "required_templates",
}


class ReferenceExporter(Extension):

    name = "references"

    def __init__(self, directives: dict[str, str] | None = None):
        self.directives = dict(directives or DEFAULT_DIRECTIVES)
        self._found: dict[str, dict[str, None]] = {}

    def on_analyze(self, ctx) -> None:
        self._found = {key: {} for key in self.directives.values()}

    def on_visit_module(self, ctx, module) -> None:
        for file in module.sources():
            for directive, key in self.directives.items():
                for raw, url in iter_directive_args(file.content, directive, plural=True):
                    if url is None:
                        ctx.warn(
                            f"Syntax error on {directive} directive argument: {raw}",
                            path=file.path,
                        )
                        continue
                    self._found[key].setdefault(resolve_reference(file.path, url), None)

    def on_emit(self, ctx, emitter) -> None:
        for key, paths in self._found.items():
            ctx.exports[key] = list(paths)
