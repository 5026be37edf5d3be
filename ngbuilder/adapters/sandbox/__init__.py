"""Script sandboxes — node, mock."""

from ngbuilder.adapters.sandbox.base import ScriptSandbox
from ngbuilder.adapters.sandbox.mock import MockSandbox
from ngbuilder.adapters.sandbox.node import NodeSandbox

__all__ = ["MockSandbox", "NodeSandbox", "ScriptSandbox"]
