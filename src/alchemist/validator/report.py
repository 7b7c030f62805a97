# src/alchemist/validator/report.py
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from alchemist.errors import ValidationError
from alchemist.schemas.models import (
    GLOBAL_ENTITY_ID,
    Client,
    EntityType,
    Task,
    ValidationResult,
    Worker,
)
from alchemist.validator.index import SkillIndex

logger = logging.getLogger(__name__)


def _rows_with_errors(result: ValidationResult) -> dict[str, int]:
    rows: dict[str, set[int]] = {e.value: set() for e in EntityType}
    for d in result.errors:
        if d.entity_id != GLOBAL_ENTITY_ID:
            rows[d.entity_type].add(d.row_index)
    return {entity: len(r) for entity, r in rows.items()}


def build_report(
    result: ValidationResult,
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
    index: SkillIndex | None = None,
    fail_on_warnings: bool = False,
) -> dict[str, Any]:
    """
    @brief
    Assemble a validation result into a serializable report.

    @details
    The report is valid when there are no errors (and, with fail_on_warnings,
    no warnings). The summary counts records, rows carrying at least one
    error per entity type, and group sizes when an index is provided.
    No files are written at this stage.

    @returns
        Report dictionary with timestamp, valid, counts, summary, errors, warnings.
    """
    valid = result.is_valid and not (fail_on_warnings and result.warnings)

    summary: dict[str, Any] = {
        "total_clients": len(clients),
        "total_workers": len(workers),
        "total_tasks": len(tasks),
        "rows_with_errors": _rows_with_errors(result),
    }
    if index is not None:
        summary["groups"] = {
            "client": {g: len(m) for g, m in sorted(index.client_groups.items())},
            "worker": {g: len(m) for g, m in sorted(index.worker_groups.items())},
        }

    payload = result.to_dict()
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "valid": bool(valid),
        "counts": {"errors": len(result.errors), "warnings": len(result.warnings)},
        "summary": summary,
        "errors": payload["errors"],
        "warnings": payload["warnings"],
    }


def save_report(
    report: dict[str, Any],
    out_dir: Path | None = None,
    filename: str = "validation_report.json",
) -> Path:
    """
    Writes the report atomically to disk.

    Args:
        report: Validation report dictionary.
        out_dir: Target directory (defaults to 'data/output').
        filename: Target filename (default 'validation_report.json').

    Returns:
        Path to the written JSON file.
    """
    target_dir = out_dir or Path("data/output")
    target_dir.mkdir(parents=True, exist_ok=True)

    final_path = target_dir / filename
    tmp_path = final_path.with_suffix(".tmp")

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        tmp_path.replace(final_path)
    except (OSError, TypeError, ValueError) as e:
        raise ValidationError(
            f"Failed to write validation report: {e}",
            source="report.save_report",
            suggested_action="Check disk permissions and free space.",
        ) from e

    logger.info("Validation report saved: %s", final_path)
    return final_path


__all__ = ["build_report", "save_report"]
