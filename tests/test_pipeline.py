"""
End-to-end tests for one target's build pipeline (in-memory sources).
"""

import pytest

from ngbuilder.core.errors import (
    BuildConfigError,
    BuildWarningError,
    DependencyCycleError,
    MissingModuleError,
)

from conftest import make_pipeline

UTIL = """
    (function (module) {
      module.value('u', 1);
    })(angular.module('Util', []));
"""

APP = """
    (function (module) {
      module.run(function () {});
    })(angular.module('App', ['Util']));
"""


class TestReleaseBuild:
    def test_dependency_emitted_first(self, mock_sandbox):
        output = make_pipeline({"app.js": APP, "util.js": UTIL}, sandbox=mock_sandbox).run()
        assert output.modules == ["Util", "App"]
        assert output.files == ["util.js", "app.js"]
        content = output.content
        assert content.index("angular.module('Util', [])") < content.index("module.run(")
        assert "})(angular.module('App', ['Util']));" in content

    def test_wrapped_code_is_not_validated(self, mock_sandbox):
        make_pipeline({"app.js": APP, "util.js": UTIL}, sandbox=mock_sandbox).run()
        assert mock_sandbox.call_count == 0

    def test_appended_files_share_one_closure(self, mock_sandbox):
        files = {
            "lib.js": "angular.module('Lib', []);\n",
            "lib_a.js": "angular.module('Lib').value('a', 1);\n",
            "lib_b.js": "angular.module('Lib').value('b', 2);\n",
            "app.js": "angular.module('App', ['Lib']);\n",
        }
        output = make_pipeline(files, sandbox=mock_sandbox).run()
        content = output.content
        assert content.count("(function (module) {") == 1
        assert content.index("  module.value('a', 1);") < content.index("  module.value('b', 2);")
        assert "})(angular.module('Lib', []));" in content
        assert "angular.module('App', ['Lib']);\n" in content
        assert mock_sandbox.call_count == 4

    def test_same_output_twice(self):
        pipeline = make_pipeline({"app.js": APP, "util.js": UTIL})
        assert pipeline.run().content == pipeline.run().content

    def test_shared_file_emitted_once(self):
        files = {
            "a.js": "angular.module('A', []);\n",
            "b.js": "angular.module('B', []);\n",
            "shared.js": "angular.module('A').value('x', 1);\nangular.module('B').value('y', 2);\n",
            "app.js": "angular.module('App', ['A', 'B']);\n",
        }
        output = make_pipeline(files).run()
        assert output.content.count("value('y', 2)") == 1
        assert output.files == ["a.js", "shared.js", "b.js", "app.js"]

    def test_externals_are_not_emitted(self):
        files = {
            "app.js": "angular.module('App', ['ng', 'ngRoute']);\n",
            "route.js": "angular.module('ngRoute', []);\n",
        }
        output = make_pipeline(files, external_modules=["ngRoute"]).run()
        assert output.modules == ["App"]
        assert "ngRoute', [])" not in output.content

    def test_excluded_module_dependencies_still_emitted(self):
        files = {
            "app.js": "angular.module('App', ['Lib']);\n",
            "lib.js": "angular.module('Lib', ['Core']);\n",
            "core.js": "angular.module('Core', []);\n",
        }
        output = make_pipeline(files, excluded_modules=["Lib"]).run()
        assert output.modules == ["Core", "App"]


class TestFatalErrors:
    def test_missing_main_module(self):
        with pytest.raises(MissingModuleError):
            make_pipeline({"app.js": APP}, main_module="Nope").run()

    def test_missing_dependency(self):
        with pytest.raises(MissingModuleError) as exc:
            make_pipeline({"app.js": APP}).run()
        assert exc.value.required_by == "App"

    def test_cycle(self):
        files = {
            "app.js": "angular.module('App', ['A']);\n",
            "a.js": "angular.module('A', ['App']);\n",
        }
        with pytest.raises(DependencyCycleError):
            make_pipeline(files).run()

    def test_no_main_module(self):
        with pytest.raises(BuildConfigError, match="No main module"):
            make_pipeline({"app.js": APP}, main_module="").run()

    def test_no_sources(self):
        with pytest.raises(BuildConfigError, match="No source files"):
            make_pipeline({}).run()


class TestWarnings:
    LEAKY = {"app.js": "angular.module('App', []);\nfunction helper() {}\n"}

    def test_global_leak_stops_build(self, mock_sandbox):
        mock_sandbox.set_leak("helper", "helper", kind="function")
        with pytest.raises(BuildWarningError) as exc:
            make_pipeline(self.LEAKY, sandbox=mock_sandbox).run()
        assert "Incompatible code found on the global scope!" in exc.value.message
        assert exc.value.path == "app.js"

    def test_global_leak_forced(self, mock_sandbox):
        mock_sandbox.set_leak("helper", "helper", kind="function")
        pipeline = make_pipeline(self.LEAKY, sandbox=mock_sandbox, force=True)
        output = pipeline.run()
        assert "  function helper() {}" in output.content
        assert len(pipeline.context.warnings) == 1
        assert "helper" in pipeline.context.warnings[0].message

    def test_lexical_declaration_detected(self, mock_sandbox):
        files = {"app.js": "angular.module('App', []);\nconst limit = 3;\n"}
        with pytest.raises(BuildWarningError) as exc:
            make_pipeline(files, sandbox=mock_sandbox).run()
        assert "limit" in exc.value.message

    def test_validation_can_be_disabled(self, mock_sandbox):
        mock_sandbox.set_leak("helper", "helper")
        make_pipeline(self.LEAKY, sandbox=mock_sandbox, validate_unwrapped=False).run()
        assert mock_sandbox.call_count == 0

    def test_unmatched_module_variable(self):
        files = {"app.js": "(function (app) {\n  app.value('a', 1);\n})(angular.module('App', []));\n"}
        with pytest.raises(BuildWarningError, match="rename_module_refs"):
            make_pipeline(files).run()

    def test_module_variable_renamed(self):
        files = {"app.js": "(function (app) {\n  app.value('a', 1);\n})(angular.module('App', []));\n"}
        pipeline = make_pipeline(files, rename_module_refs=True)
        output = pipeline.run()
        assert "  module.value('a', 1);" in output.content
        assert "app.value" not in output.content
        assert pipeline.context.warnings == []

    def test_wrong_module_declaration(self):
        files = {
            "app.js": "angular.module('App', []);\n",
            "extra.js": "(function (m) {\n  angular.module('App').value('x', 1);\n})(angular.module('Other'));\n",
        }
        with pytest.raises(BuildWarningError) as exc:
            make_pipeline(files).run()
        assert exc.value.message == "Wrong module declaration: 'Other' in a file of module 'App'."

        output = make_pipeline(files, force=True).run()
        assert "  (function (m) {" in output.content

    def test_module_without_declaration(self):
        files = {
            "app.js": "angular.module('App', ['Lib']);\n",
            "lib_a.js": "angular.module('Lib').value('a', 1);\n",
        }
        with pytest.raises(BuildWarningError, match="Module 'Lib' has no declaration."):
            make_pipeline(files).run()

        output = make_pipeline(files, force=True).run()
        assert "})(angular.module('Lib'));" in output.content

    def test_ambiguous_file(self):
        files = {
            "app.js": (
                "angular.module('App', []);\n"
                "angular.module('B', []);\n"
                "angular.module('C').value('x', 1);\n"
            ),
        }
        with pytest.raises(BuildWarningError, match="multiple modules"):
            make_pipeline(files).run()


class TestStandaloneScripts:
    def test_force_include(self):
        files = {
            "vendor/lib.js": "window.lib = {};\n",
            "app.js": "angular.module('App', []);\n",
        }
        output = make_pipeline(files, force_include=["vendor/*.js"]).run()
        assert output.content == "window.lib = {};\n\nangular.module('App', []);\n\n\n"
        assert output.files == ["vendor/lib.js", "app.js"]

    def test_files_without_headers_are_ignored(self):
        files = {
            "vendor/lib.js": "window.lib = {};\n",
            "app.js": "angular.module('App', []);\n",
        }
        pipeline = make_pipeline(files)
        output = pipeline.run()
        assert "window.lib" not in output.content
        assert [(d.level, d.path) for d in pipeline.context.diagnostics] == [
            ("info", "vendor/lib.js")
        ]

    def test_require_option(self):
        pipeline = make_pipeline(
            {"app.js": "angular.module('App', []);\n"},
            extra_files={"polyfill.js": "var shim = 1;\n"},
            require=["polyfill.js"],
        )
        output = pipeline.run()
        assert output.content.startswith("var shim = 1;\n")
        assert output.files[0] == "polyfill.js"

    def test_require_option_missing_file(self):
        with pytest.raises(BuildConfigError, match="polyfill.js"):
            make_pipeline({"app.js": "angular.module('App', []);\n"}, require=["polyfill.js"]).run()


class TestDebugBuild:
    def test_loader_lists_files_in_order(self, mock_sandbox):
        rules = [{"match": "^", "replace_with": "/static/"}]
        output = make_pipeline(
            {"app.js": APP, "util.js": UTIL},
            sandbox=mock_sandbox,
            debug=True,
            rebase_debug_urls=rules,
        ).run()
        assert output.mode == "debug"
        assert output.content == (
            "document.write ('\\\n"
            '<script src="/static/util.js"></script>\\\n'
            '<script src="/static/app.js"></script>\\\n'
            "');"
        )
        assert mock_sandbox.call_count == 0

    def test_debug_build_skips_leak_checks(self, mock_sandbox):
        mock_sandbox.set_leak("helper", "helper")
        files = {"app.js": "angular.module('App', []);\nfunction helper() {}\n"}
        output = make_pipeline(files, sandbox=mock_sandbox, debug=True).run()
        assert 'src="app.js"' in output.content
