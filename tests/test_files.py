"""
Tests for source discovery, reading and artifact writing.
"""

from ngbuilder.adapters.files import (
    OutputWriter,
    discover_sources,
    path_matches,
    read_source,
    resolve_reference,
    sort_files_before_subfolders,
)


def _touch(root, *paths):
    for rel in paths:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("// " + rel)


class TestDiscoverSources:
    def test_glob_with_files_before_subfolders(self, tmp_path):
        _touch(tmp_path, "src/b.js", "src/a.js", "src/sub/c.js", "src/readme.txt")
        found, missing = discover_sources(tmp_path, ["src/**/*.js"])
        assert found == ["src/a.js", "src/b.js", "src/sub/c.js"]
        assert missing == []

    def test_negation_removes_earlier_matches(self, tmp_path):
        _touch(tmp_path, "src/a.js", "src/a.spec.js")
        found, _ = discover_sources(tmp_path, ["src/*.js", "!src/*.spec.js"])
        assert found == ["src/a.js"]

    def test_literal_paths(self, tmp_path):
        _touch(tmp_path, "app.js")
        found, missing = discover_sources(tmp_path, ["app.js", "gone.js"])
        assert found == ["app.js"]
        assert missing == ["gone.js"]

    def test_glob_without_matches_is_not_missing(self, tmp_path):
        found, missing = discover_sources(tmp_path, ["lib/*.js"])
        assert found == []
        assert missing == []

    def test_no_duplicates(self, tmp_path):
        _touch(tmp_path, "a.js")
        found, _ = discover_sources(tmp_path, ["*.js", "a.js"])
        assert found == ["a.js"]


class TestPathHelpers:
    def test_sort(self):
        paths = ["z/y.js", "b.js", "z/a.js", "a/q/r.js", "a/s.js"]
        assert sort_files_before_subfolders(paths) == [
            "b.js", "a/s.js", "a/q/r.js", "z/a.js", "z/y.js",
        ]

    def test_path_matches_basename(self):
        assert path_matches("vendor/x/jquery.lib.js", ["*.lib.js"])
        assert not path_matches("vendor/x/jquery.js", ["*.lib.js"])

    def test_path_matches_full_path(self):
        assert path_matches("vendor/x.js", ["vendor/*.js"])
        assert not path_matches("lib/x.js", ["vendor/*.js"])

    def test_resolve_reference(self):
        assert resolve_reference("src/app.js", "lib/x.js") == "src/lib/x.js"
        assert resolve_reference("src/app.js", "../x.css") == "x.css"
        assert resolve_reference("src/app.js", "./a/../b.js") == "src/b.js"
        assert resolve_reference("app.js", "../up.js") == "../up.js"


class TestReadWrite:
    def test_read_strips_bom(self, tmp_path):
        path = tmp_path / "a.js"
        path.write_bytes("\ufeffvar a;".encode("utf-8"))
        assert read_source(path) == "var a;"

    def test_first_write_replaces_then_appends(self, tmp_path):
        dest = tmp_path / "out" / "app.js"
        dest.parent.mkdir()
        dest.write_text("stale")

        writer = OutputWriter()
        assert writer.write(dest, "one") == 3
        writer.write(dest, "two")
        assert dest.read_text() == "one\ntwo"

    def test_new_writer_replaces_again(self, tmp_path):
        dest = tmp_path / "app.js"
        OutputWriter().write(dest, "one")
        OutputWriter().write(dest, "two")
        assert dest.read_text() == "two"

    def test_creates_directories(self, tmp_path):
        dest = tmp_path / "deep" / "dir" / "app.js"
        OutputWriter().write(dest, "x")
        assert dest.read_text() == "x"
