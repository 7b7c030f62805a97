# src/alchemist/validator/passes.py
"""
Independent validation passes.

Every pass has the signature (clients, workers, tasks, index) -> list[Diagnostic],
reads only its inputs and the shared SkillIndex, and never looks at another
pass's output. Records a pass cannot evaluate (e.g. a non-integer numeric
field) are skipped by that pass.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from operator import attrgetter
from typing import Any, NamedTuple

from alchemist.schemas.models import (
    GLOBAL_ENTITY_ID,
    Client,
    Diagnostic,
    EntityType,
    Severity,
    Task,
    Worker,
)
from alchemist.validator.codec import decode_int_array, decode_structured
from alchemist.validator.index import SkillIndex, as_int, normalize, split_list

ValidationPass = Callable[
    [Sequence[Client], Sequence[Worker], Sequence[Task], SkillIndex], list[Diagnostic]
]


class Column(NamedTuple):
    name: str
    get: Callable[[Any], Any]
    index: int


def _columns(*pairs: tuple[str, str]) -> tuple[Column, ...]:
    return tuple(Column(name, attrgetter(attr), i) for i, (name, attr) in enumerate(pairs))


CLIENT_COLUMNS = _columns(
    ("ClientID", "client_id"),
    ("ClientName", "client_name"),
    ("PriorityLevel", "priority_level"),
    ("RequestedTaskIDs", "requested_task_ids"),
    ("GroupTag", "group_tag"),
    ("AttributesJSON", "attributes_json"),
)
WORKER_COLUMNS = _columns(
    ("WorkerID", "worker_id"),
    ("WorkerName", "worker_name"),
    ("Skills", "skills"),
    ("AvailableSlots", "available_slots"),
    ("MaxLoadPerPhase", "max_load_per_phase"),
    ("WorkerGroup", "worker_group"),
    ("QualificationLevel", "qualification_level"),
)
TASK_COLUMNS = _columns(
    ("TaskID", "task_id"),
    ("TaskName", "task_name"),
    ("Category", "category"),
    ("Duration", "duration"),
    ("RequiredSkills", "required_skills"),
    ("PreferredPhases", "preferred_phases"),
    ("MaxConcurrent", "max_concurrent"),
)

COLUMNS: dict[EntityType, tuple[Column, ...]] = {
    EntityType.CLIENT: CLIENT_COLUMNS,
    EntityType.WORKER: WORKER_COLUMNS,
    EntityType.TASK: TASK_COLUMNS,
}


def column(entity: EntityType, name: str) -> Column:
    return next(c for c in COLUMNS[entity] if c.name == name)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _entity_id(entity: EntityType, record: Any) -> str:
    return _text(COLUMNS[entity][0].get(record))


def _diag(
    severity: Severity,
    entity: EntityType,
    record: Any,
    row: int,
    field: str,
    message: str,
) -> Diagnostic:
    return Diagnostic(
        entity_type=entity,
        entity_id=_entity_id(entity, record),
        field=field,
        message=message,
        severity=severity,
        row_index=row,
        column_index=column(entity, field).index,
    )


def _error(entity: EntityType, record: Any, row: int, field: str, message: str) -> Diagnostic:
    return _diag(Severity.ERROR, entity, record, row, field, message)


def _warning(entity: EntityType, record: Any, row: int, field: str, message: str) -> Diagnostic:
    return _diag(Severity.WARNING, entity, record, row, field, message)


def _collections(
    clients: Sequence[Client], workers: Sequence[Worker], tasks: Sequence[Task]
) -> tuple[tuple[EntityType, Sequence[Any]], ...]:
    return (
        (EntityType.CLIENT, clients),
        (EntityType.WORKER, workers),
        (EntityType.TASK, tasks),
    )


# ----------------------------
# Structural passes
# ----------------------------
def check_required_columns(clients, workers, tasks, index) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for entity, records in _collections(clients, workers, tasks):
        for row, record in enumerate(records):
            for col in COLUMNS[entity]:
                if not _text(col.get(record)).strip():
                    out.append(
                        _error(entity, record, row, col.name, f"Missing required field: {col.name}")
                    )
    return out


def check_duplicate_ids(clients, workers, tasks, index) -> list[Diagnostic]:
    """Flag second and later occurrences of an identifier. Blank ids are left to required columns."""
    out: list[Diagnostic] = []
    for entity, records in _collections(clients, workers, tasks):
        id_col = COLUMNS[entity][0]
        seen: set[str] = set()
        for row, record in enumerate(records):
            rid = _text(id_col.get(record))
            if not rid.strip():
                continue
            if rid in seen:
                out.append(_error(entity, record, row, id_col.name, f"Duplicate {id_col.name} found"))
            seen.add(rid)
    return out


def check_malformed_arrays(clients, workers, tasks, index) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for row, worker in enumerate(workers):
        if not decode_int_array(worker.available_slots).ok:
            out.append(
                _error(
                    EntityType.WORKER,
                    worker,
                    row,
                    "AvailableSlots",
                    "AvailableSlots must be a JSON array of positive integers",
                )
            )
    for row, task in enumerate(tasks):
        if not decode_int_array(task.preferred_phases).ok:
            out.append(
                _error(
                    EntityType.TASK,
                    task,
                    row,
                    "PreferredPhases",
                    "PreferredPhases must be a JSON array of positive integers",
                )
            )
    return out


def check_value_ranges(clients, workers, tasks, index) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for row, client in enumerate(clients):
        priority = as_int(client.priority_level)
        if priority is not None and not 1 <= priority <= 5:
            out.append(
                _error(
                    EntityType.CLIENT,
                    client,
                    row,
                    "PriorityLevel",
                    f"PriorityLevel must be between 1 and 5 (got {priority})",
                )
            )
    for row, worker in enumerate(workers):
        load = as_int(worker.max_load_per_phase)
        if load is not None and load < 1:
            out.append(
                _error(
                    EntityType.WORKER,
                    worker,
                    row,
                    "MaxLoadPerPhase",
                    f"MaxLoadPerPhase must be at least 1 (got {load})",
                )
            )
    for row, task in enumerate(tasks):
        for name, value in (("Duration", task.duration), ("MaxConcurrent", task.max_concurrent)):
            number = as_int(value)
            if number is not None and number < 1:
                out.append(
                    _error(
                        EntityType.TASK, task, row, name, f"{name} must be at least 1 (got {number})"
                    )
                )
    return out


def check_attributes_json(clients, workers, tasks, index) -> list[Diagnostic]:
    return [
        _error(
            EntityType.CLIENT,
            client,
            row,
            "AttributesJSON",
            "AttributesJSON must be a valid JSON object or array",
        )
        for row, client in enumerate(clients)
        if not decode_structured(client.attributes_json)
    ]


# ----------------------------
# Referential pass
# ----------------------------
def check_cross_references(clients, workers, tasks, index) -> list[Diagnostic]:
    task_ids = {_text(t.task_id) for t in tasks}
    out: list[Diagnostic] = []
    for row, client in enumerate(clients):
        for task_id in split_list(client.requested_task_ids):
            if task_id not in task_ids:
                out.append(
                    _error(
                        EntityType.CLIENT,
                        client,
                        row,
                        "RequestedTaskIDs",
                        f"Requested task {task_id} does not exist",
                    )
                )
    return out


# ----------------------------
# Heuristic and feasibility passes
# ----------------------------
def check_naming_cycles(clients, workers, tasks, index) -> list[Diagnostic]:
    """
    Weak heuristic: a task whose own id appears in its name or category is
    flagged as a potential self-reference. The record model has no dependency
    edges, so this is not cycle detection.
    """
    out: list[Diagnostic] = []
    for row, task in enumerate(tasks):
        task_id = _text(task.task_id)
        if not task_id.strip():
            continue
        if task_id in _text(task.task_name) or task_id in _text(task.category):
            out.append(
                _warning(
                    EntityType.TASK,
                    task,
                    row,
                    "TaskName",
                    "Potential circular dependency detected",
                )
            )
    return out


def check_worker_overload(clients, workers, tasks, index) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for row, worker in enumerate(workers):
        decoded = decode_int_array(worker.available_slots)
        load = as_int(worker.max_load_per_phase)
        if not decoded.ok or load is None:
            continue
        if len(decoded.values) < load:
            out.append(
                _warning(
                    EntityType.WORKER,
                    worker,
                    row,
                    "MaxLoadPerPhase",
                    f"Worker may be overloaded: {len(decoded.values)} slots available "
                    f"but max load is {load}",
                )
            )
    return out


def check_phase_saturation(clients, workers, tasks, index) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for phase in sorted(index.phase_demand):
        demand = index.phase_demand[phase]
        capacity = index.phase_capacity.get(phase, 0)
        if demand > capacity:
            out.append(
                Diagnostic(
                    entity_type=EntityType.TASK,
                    entity_id=GLOBAL_ENTITY_ID,
                    field="PreferredPhases",
                    message=(
                        f"Phase {phase} may be oversaturated: "
                        f"demand {demand} > capacity {capacity}"
                    ),
                    severity=Severity.WARNING,
                    row_index=0,
                    column_index=column(EntityType.TASK, "PreferredPhases").index,
                )
            )
    return out


def check_skill_coverage(clients, workers, tasks, index) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for row, task in enumerate(tasks):
        missing: dict[str, str] = {}
        for skill in split_list(task.required_skills):
            key = normalize(skill)
            if key not in index.worker_skills:
                missing.setdefault(key, skill)
        if missing:
            out.append(
                _error(
                    EntityType.TASK,
                    task,
                    row,
                    "RequiredSkills",
                    f"No workers available with skills: {', '.join(missing.values())}",
                )
            )
    return out


def check_concurrency_feasibility(clients, workers, tasks, index) -> list[Diagnostic]:
    out: list[Diagnostic] = []
    for row, task in enumerate(tasks):
        limit = as_int(task.max_concurrent)
        if limit is None:
            continue
        qualified = index.qualified_worker_count(split_list(task.required_skills))
        if qualified < limit:
            out.append(
                _warning(
                    EntityType.TASK,
                    task,
                    row,
                    "MaxConcurrent",
                    f"MaxConcurrent ({limit}) exceeds available qualified workers ({qualified})",
                )
            )
    return out


# Execution order; determines the order of the returned diagnostics.
PASSES: tuple[ValidationPass, ...] = (
    check_required_columns,
    check_duplicate_ids,
    check_malformed_arrays,
    check_value_ranges,
    check_attributes_json,
    check_cross_references,
    check_naming_cycles,
    check_worker_overload,
    check_phase_saturation,
    check_skill_coverage,
    check_concurrency_feasibility,
)


__all__ = [
    "CLIENT_COLUMNS",
    "COLUMNS",
    "PASSES",
    "TASK_COLUMNS",
    "WORKER_COLUMNS",
    "Column",
    "ValidationPass",
    "check_attributes_json",
    "check_concurrency_feasibility",
    "check_cross_references",
    "check_duplicate_ids",
    "check_malformed_arrays",
    "check_naming_cycles",
    "check_phase_saturation",
    "check_required_columns",
    "check_skill_coverage",
    "check_value_ranges",
    "check_worker_overload",
    "column",
]
