"""Adapters — file system and script sandbox bindings.

Public re-exports for convenient access.
"""

from ngbuilder.adapters.files import OutputWriter, discover_sources, read_source
from ngbuilder.adapters.sandbox import MockSandbox, NodeSandbox, ScriptSandbox

__all__ = [
    "MockSandbox",
    "NodeSandbox",
    "OutputWriter",
    "ScriptSandbox",
    "discover_sources",
    "read_source",
]
