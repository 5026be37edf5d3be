"""
Dependency resolver — post-order traversal of the module graph.

Each module is visited after all of its dependencies, in declared
dependency order, and at most once. A module met again while it is
still being resolved closes a cycle; that is a fatal error carrying the
cycle path.
"""

from __future__ import annotations

import logging
from enum import Enum

from ngbuilder.core.errors import DependencyCycleError, MissingModuleError
from ngbuilder.core.models.module import ModuleRecord
from ngbuilder.core.services.registry import ModuleRegistry

logger = logging.getLogger(__name__)


class VisitState(str, Enum):
    IN_PROGRESS = "in_progress"
    DONE = "done"


def resolve_order(
    registry: ModuleRegistry,
    entry: str,
    excluded: list[str] | None = None,
) -> list[ModuleRecord]:
    """Modules reachable from ``entry``, dependencies first.

    External modules end the traversal of their branch and are not
    returned. Excluded modules are not returned either, but their
    dependencies still are; an excluded name that is unknown to the
    registry is skipped.

    Raises:
        MissingModuleError: ``entry`` or a dependency is not registered.
        DependencyCycleError: The graph loops.
    """
    excluded_set = set(excluded or [])
    states: dict[str, VisitState] = {}
    path: list[str] = []
    order: list[ModuleRecord] = []

    def visit(name: str, required_by: str | None) -> None:
        state = states.get(name)
        if state is VisitState.DONE:
            return
        if state is VisitState.IN_PROGRESS:
            raise DependencyCycleError(path[path.index(name):] + [name])

        record = registry.get(name)
        if record is None:
            if name in excluded_set:
                states[name] = VisitState.DONE
                return
            raise MissingModuleError(name, required_by)
        if record.is_external:
            states[name] = VisitState.DONE
            return

        states[name] = VisitState.IN_PROGRESS
        path.append(name)
        for dep in record.dependencies:
            visit(dep, name)
        path.pop()
        states[name] = VisitState.DONE

        if name in excluded_set:
            logger.info("Excluding module %s", name)
            return
        order.append(record)

    visit(entry, None)
    return order
