"""
Shared test fixtures and configuration.
"""

import shutil
import textwrap
from pathlib import Path

import pytest

from ngbuilder.adapters.sandbox.mock import MockSandbox
from ngbuilder.core.engine.pipeline import BuildPipeline
from ngbuilder.core.models import BuildOptions, BuildTarget, SourceFile

requires_node = pytest.mark.skipif(
    shutil.which("node") is None, reason="Node.js is not installed"
)


@pytest.fixture
def mock_sandbox() -> MockSandbox:
    return MockSandbox()


def js(text: str) -> str:
    """Dedent an inline script."""
    return textwrap.dedent(text).lstrip("\n")


def make_sources(files: dict[str, str]) -> list[SourceFile]:
    return [SourceFile(path=path, content=js(content)) for path, content in files.items()]


def make_pipeline(
    files: dict[str, str],
    sandbox: MockSandbox | None = None,
    extra_files: dict[str, str] | None = None,
    force_include: list[str] | None = None,
    **options,
) -> BuildPipeline:
    """A pipeline over in-memory files; ``extra_files`` are readable but not sources."""
    options.setdefault("main_module", "App")
    readable = {**files, **(extra_files or {})}

    def read_file(path: str) -> str:
        if path not in readable:
            raise FileNotFoundError(path)
        return js(readable[path])

    return BuildPipeline(
        BuildTarget(name="test", src=["**/*.js"], dest="out.js", force_include=force_include or []),
        BuildOptions(**options),
        make_sources(files),
        read_file=read_file,
        sandbox=sandbox or MockSandbox(),
    )


def write_project(root: Path, config: str, files: dict[str, str]) -> Path:
    """Lay out a project on disk and return the ngbuilder.yml path."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(js(content))
    cfg = root / "ngbuilder.yml"
    cfg.write_text(textwrap.dedent(config))
    return cfg
