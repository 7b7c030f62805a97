# src/alchemist/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from alchemist.errors import ValidationError
from alchemist.schemas.models import (
    Client,
    Config,
    Diagnostic,
    Severity,
    Task,
    ValidationResult,
    Worker,
)
from alchemist.validator.index import SkillIndex, build_index
from alchemist.validator.passes import PASSES, ValidationPass
from alchemist.validator.report import build_report, save_report

logger = logging.getLogger(__name__)


def _snapshot(name: str, records: Sequence[Any] | None) -> tuple[Any, ...]:
    """
    @brief
    Freeze an input collection for the duration of one run.

    @raises
        ValidationError
            If the collection is None (caller contract violation, not a data error).
    """
    if records is None:
        raise ValidationError(
            message=f"{name} collection is None",
            source="validator.validate_all",
            suggested_action="Pass an empty list when a record set has no rows.",
        )
    return tuple(records)


def validate_all(
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
    *,
    parallel: bool = False,
    max_workers: int | None = None,
) -> ValidationResult:
    """
    @brief
    Run every validation pass over the three record sets.

    @details
    Builds the SkillIndex once, runs all passes in their fixed order and splits
    the findings into errors and warnings, preserving pass order and then
    record order. Each call is an independent computation over the given
    snapshot: nothing is retained between calls and the inputs are never
    mutated.

    When parallel=True the passes run on a thread pool. Every pass fills its
    own result slot and the slots are concatenated in pass order, so the
    output is identical to a sequential run.

    @params
        clients, workers, tasks : Sequence
            Typed records as delivered by ingestion (may be empty).
        parallel : bool
            Execute passes concurrently.
        max_workers : int | None
            Thread pool size for parallel execution.

    @returns
        ValidationResult with freshly constructed errors and warnings lists.

    @raises
        ValidationError
            If any collection is None.
    """
    # (1) Snapshot inputs and build shared read-only index
    c, w, t = _snapshot_all(clients, workers, tasks)
    return _run_passes(c, w, t, build_index(c, w, t), parallel, max_workers)


def _snapshot_all(
    clients: Sequence[Client], workers: Sequence[Worker], tasks: Sequence[Task]
) -> tuple[tuple[Any, ...], tuple[Any, ...], tuple[Any, ...]]:
    return (
        _snapshot("clients", clients),
        _snapshot("workers", workers),
        _snapshot("tasks", tasks),
    )


def _run_passes(
    c: tuple[Any, ...],
    w: tuple[Any, ...],
    t: tuple[Any, ...],
    index: SkillIndex,
    parallel: bool,
    max_workers: int | None,
) -> ValidationResult:
    logger.debug(
        "Validating %d client(s), %d worker(s), %d task(s) with %d pass(es)",
        len(c),
        len(w),
        len(t),
        len(PASSES),
    )

    # (2) Run passes into per-pass slots
    def run(check: ValidationPass) -> list[Diagnostic]:
        return check(c, w, t, index)

    if parallel:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            slots = list(pool.map(run, PASSES))
    else:
        slots = [run(check) for check in PASSES]

    # (3) Concatenate in fixed pass order
    result = _collect(slots)
    logger.info(
        "Validation finished: %d error(s), %d warning(s)", len(result.errors), len(result.warnings)
    )
    return result


def _collect(slots: list[list[Diagnostic]]) -> ValidationResult:
    errors: list[Diagnostic] = []
    warnings: list[Diagnostic] = []
    for diagnostics in slots:
        for d in diagnostics:
            (errors if d.severity == Severity.ERROR else warnings).append(d)
    return ValidationResult(errors=errors, warnings=warnings)


def build_run_index(
    clients: Sequence[Client], workers: Sequence[Worker], tasks: Sequence[Task]
) -> SkillIndex:
    """Expose the index of a snapshot for reporting and downstream readers."""
    return build_index(*_snapshot_all(clients, workers, tasks))


def validate_dataset(
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
    cfg: Config | None = None,
    write_report: bool = False,
    out_dir: Path | None = None,
) -> dict[str, Any]:
    """
    @brief
    Facade: validate, build the report and optionally persist it.

    @details
    Validation settings (parallel execution, fail_on_warnings) come from
    cfg.validation when a Config is given.

    @returns
        Report dictionary (see validator.report.build_report).
    """
    vcfg = (cfg or Config()).validation
    # (1) Shared snapshot and index for passes and report
    c, w, t = _snapshot_all(clients, workers, tasks)
    index = build_index(c, w, t)
    result = _run_passes(c, w, t, index, vcfg.parallel, vcfg.max_workers)
    report = build_report(
        result,
        c,
        w,
        t,
        index=index,
        fail_on_warnings=vcfg.fail_on_warnings,
    )
    if write_report:
        save_report(report, out_dir=out_dir)
    return report


__all__ = ["build_run_index", "validate_all", "validate_dataset"]
