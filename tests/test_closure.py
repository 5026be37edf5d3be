"""
Tests for closure analysis.
"""

import pytest

from ngbuilder.core.services.closure import analyze_closure, wrap_closure


class TestAnalyzeClosure:
    def test_parenthesized_with_declaration(self):
        info = analyze_closure(
            "(function (module) {\n  var a;\n})(angular.module('App', ['x']));"
        )
        assert info is not None
        assert info.param_name == "module"
        assert info.body == "\n  var a;\n"
        assert info.declared_name == "App"
        assert info.declared_dependencies == ["x"]

    def test_append_reference(self):
        info = analyze_closure("(function (m) { m.value('a', 1); })(angular.module('Lib'))")
        assert info.declared_name == "Lib"
        assert info.declared_dependencies is None
        assert info.has_declaration

    def test_no_parameter_no_argument(self):
        info = analyze_closure("(function () {\n  go();\n})();")
        assert info.param_name is None
        assert info.invocation_args == ""
        assert not info.has_declaration

    def test_invocation_inside_parens(self):
        info = analyze_closure("(function (m) { x(); }(angular.module('A')));")
        assert info.param_name == "m"
        assert info.body == " x(); "
        assert info.declared_name == "A"

    def test_bang_form(self):
        info = analyze_closure("!function (m) { x(); }(angular.module('A'));")
        assert info.param_name == "m"
        assert info.declared_name == "A"

    def test_semicolon_optional(self):
        assert analyze_closure("(function () { x(); })()") is not None

    def test_braces_in_strings_and_comments(self):
        info = analyze_closure("(function () { var s = '}'; /* } */ })();")
        assert info.body == " var s = '}'; /* } */ "

    @pytest.mark.parametrize("source", [
        "(function () {})(); foo();",
        "(function ($) {})(jQuery);",
        "(function (a, b) {})();",
        "var x = 1;",
        "(function () { x();",
        "(function () {})",
        "function named() {}",
    ])
    def test_not_a_module_closure(self, source):
        assert analyze_closure(source) is None


class TestRoundTrip:
    def test_wrap_then_analyze(self):
        body = "\n  module.value('a', 1);\n"
        info = analyze_closure(wrap_closure(body, "p", "angular.module('M', [])"))
        assert info.param_name == "p"
        assert info.body == body
        assert info.declared_name == "M"

        again = analyze_closure(wrap_closure(info.body, "module", info.invocation_args))
        assert again.param_name == "module"
        assert again.body == body
