"""
Tests for dependency resolution order.
"""

import pytest

from ngbuilder.core.engine.resolver import resolve_order
from ngbuilder.core.errors import DependencyCycleError, MissingModuleError
from ngbuilder.core.services.registry import ModuleRegistry


def _registry(graph: dict[str, list[str]], externals: list[str] | None = None) -> ModuleRegistry:
    reg = ModuleRegistry(externals)
    for name, deps in graph.items():
        reg.ingest_declaration(name, "", f"{name}.js", deps)
    return reg


def _names(records) -> list[str]:
    return [r.name for r in records]


class TestResolveOrder:
    def test_dependencies_first(self):
        reg = _registry({"App": ["Util"], "Util": []})
        assert _names(resolve_order(reg, "App")) == ["Util", "App"]

    def test_declared_order_is_tie_break(self):
        reg = _registry({"App": ["B", "A"], "A": [], "B": []})
        assert _names(resolve_order(reg, "App")) == ["B", "A", "App"]

    def test_diamond_visits_shared_once(self):
        reg = _registry({"App": ["A", "B"], "A": ["C"], "B": ["C"], "C": []})
        assert _names(resolve_order(reg, "App")) == ["C", "A", "B", "App"]

    def test_external_satisfies_but_is_not_emitted(self):
        reg = _registry({"App": ["ng", "ngRoute"]}, externals=["ng", "ngRoute"])
        assert _names(resolve_order(reg, "App")) == ["App"]

    def test_excluded_is_skipped_but_traversed(self):
        reg = _registry({"App": ["Lib"], "Lib": ["Core"], "Core": []})
        assert _names(resolve_order(reg, "App", excluded=["Lib"])) == ["Core", "App"]

    def test_excluded_unknown_name(self):
        reg = _registry({"App": ["Ghost"]})
        assert _names(resolve_order(reg, "App", excluded=["Ghost"])) == ["App"]

    def test_missing_entry(self):
        with pytest.raises(MissingModuleError) as exc:
            resolve_order(_registry({"App": []}), "Nope")
        assert exc.value.module == "Nope"
        assert "Nope" in str(exc.value)

    def test_missing_dependency_names_dependent(self):
        with pytest.raises(MissingModuleError) as exc:
            resolve_order(_registry({"App": ["Util"]}), "App")
        assert exc.value.module == "Util"
        assert exc.value.required_by == "App"

    def test_cycle(self):
        reg = _registry({"App": ["A"], "A": ["B"], "B": ["A"]})
        with pytest.raises(DependencyCycleError) as exc:
            resolve_order(reg, "App")
        assert exc.value.cycle == ["A", "B", "A"]
        assert "A → B → A" in str(exc.value)

    def test_self_dependency(self):
        with pytest.raises(DependencyCycleError) as exc:
            resolve_order(_registry({"App": ["App"]}), "App")
        assert exc.value.cycle == ["App", "App"]

    def test_deterministic(self):
        graph = {"App": ["D", "B", "C"], "B": ["D"], "C": ["B"], "D": []}
        first = _names(resolve_order(_registry(graph), "App"))
        second = _names(resolve_order(_registry(graph), "App"))
        assert first == second == ["D", "B", "C", "App"]
