# src/alchemist/validator/index.py
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from alchemist.schemas.models import Client, Task, Worker
from alchemist.validator.codec import decode_int_array


def as_int(value: Any) -> int | None:
    """Return value when it is a real integer (bools excluded), else None."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def split_list(value: Any) -> list[str]:
    """Comma-split a free-text list field, dropping blank entries. Non-text yields []."""
    if not isinstance(value, str):
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def normalize(value: str) -> str:
    return value.strip().casefold()


@dataclass(frozen=True)
class SkillIndex:
    """
    @brief
    Normalized lookup structures shared by the validation passes.

    @details
    Built once per validation run and never mutated afterwards, so passes may
    read it concurrently.

    @params
        worker_skills : frozenset[str]
            Union of all workers' skills, case-folded and trimmed.
        phase_capacity : dict[int, int]
            Phase -> sum of MaxLoadPerPhase of workers listing that phase.
        phase_demand : dict[int, int]
            Phase -> sum of Duration * MaxConcurrent of tasks listing that phase.
        skill_holders : dict[str, frozenset[int]]
            Normalized skill -> positions of the workers holding it.
        client_groups / worker_groups : dict[str, tuple[str, ...]]
            Normalized group label -> member identifiers in input order.
    """

    worker_skills: frozenset[str]
    phase_capacity: dict[int, int]
    phase_demand: dict[int, int]
    skill_holders: dict[str, frozenset[int]]
    client_groups: dict[str, tuple[str, ...]]
    worker_groups: dict[str, tuple[str, ...]]

    def qualified_worker_count(self, required_skills: Iterable[str]) -> int:
        """Number of distinct workers holding at least one of the given skills."""
        holders: set[int] = set()
        for skill in required_skills:
            holders.update(self.skill_holders.get(normalize(skill), ()))
        return len(holders)


def _phase_totals(entries: Iterable[tuple[Any, int | None]]) -> dict[int, int]:
    totals: dict[int, int] = defaultdict(int)
    for encoded, weight in entries:
        if weight is None:
            continue
        decoded = decode_int_array(encoded)
        if not decoded.ok:
            continue
        # (1) A phase listed twice contributes twice
        for phase in decoded.values:
            totals[phase] += weight
    return dict(totals)


def _groups(members: Iterable[tuple[Any, Any]]) -> dict[str, tuple[str, ...]]:
    grouped: dict[str, list[str]] = defaultdict(list)
    for member_id, label in members:
        if not isinstance(label, str) or not label.strip():
            continue
        grouped[normalize(label)].append("" if member_id is None else str(member_id))
    return {label: tuple(ids) for label, ids in grouped.items()}


def _demand_weight(task: Task) -> int | None:
    duration = as_int(task.duration)
    concurrent = as_int(task.max_concurrent)
    if duration is None or concurrent is None:
        return None
    return duration * concurrent


def build_index(
    clients: Sequence[Client], workers: Sequence[Worker], tasks: Sequence[Task]
) -> SkillIndex:
    """
    @brief
    Build the skill, capacity, demand and group structures for one run.

    @details
    Records whose encoded phase arrays fail to decode, or whose numeric weights
    are not integers, contribute nothing to capacity or demand; those records
    are reported by the malformed-data and required-column passes instead.
    """
    # (1) Skills: global set plus skill -> worker positions
    holders: dict[str, set[int]] = defaultdict(set)
    for pos, worker in enumerate(workers):
        for skill in split_list(worker.skills):
            holders[normalize(skill)].add(pos)

    # (2) Per-phase capacity and demand
    capacity = _phase_totals((w.available_slots, as_int(w.max_load_per_phase)) for w in workers)
    demand = _phase_totals((t.preferred_phases, _demand_weight(t)) for t in tasks)

    return SkillIndex(
        worker_skills=frozenset(holders),
        phase_capacity=capacity,
        phase_demand=demand,
        skill_holders={skill: frozenset(pos) for skill, pos in holders.items()},
        client_groups=_groups((c.client_id, c.group_tag) for c in clients),
        worker_groups=_groups((w.worker_id, w.worker_group) for w in workers),
    )


__all__ = ["SkillIndex", "as_int", "build_index", "normalize", "split_list"]
