from __future__ import annotations

import csv
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from alchemist.errors import ExportError
from alchemist.schemas.models import EntityType
from alchemist.validator.passes import COLUMNS

logger = logging.getLogger(__name__)


def _to_rows(records: Any, entity: EntityType) -> list[Mapping[str, Any]]:
    """
    @brief
    Converts records into mappings keyed by canonical column names.

    @details
    Accepts pydantic records (dumped by alias) or mappings already keyed by
    column name. Plain dicts and other non-iterables are rejected to avoid
    iterating over keys by accident.

    @raises
        ExportError if input is unsupported or contains unsupported items.
    """
    if isinstance(records, (Mapping, str, bytes)) or not isinstance(records, Iterable):
        raise ExportError(
            "Unsupported records type.",
            source="export.write_records_csv",
            suggested_action="Pass a list of Client/Worker/Task records.",
        )

    rows: list[Mapping[str, Any]] = []
    for record in records:
        if isinstance(record, BaseModel):
            rows.append(record.model_dump(by_alias=True))
        elif isinstance(record, Mapping):
            rows.append(record)
        else:
            raise ExportError(
                f"Cannot export {type(record).__name__} as a {entity.value} row.",
                source="export.write_records_csv",
                suggested_action="Pass pydantic records or mappings keyed by column name.",
            )
    return rows


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def write_records_csv(records: Any, entity: EntityType | str, out_path: Path) -> Path:
    """
    @brief
    Exports one record set to CSV in canonical column order.

    @details
    The header uses the canonical column names (ClientID, ClientName, ...),
    so the file loads back through RecordsLoader unchanged. None is written
    as an empty cell. Output is written to a temporary file and swapped in.

    @returns
        Path to the written CSV file.

    @raises
        ExportError for unsupported input.
    """
    entity = EntityType(entity)
    header = [c.name for c in COLUMNS[entity]]

    # (1) Normalize records to canonical rows
    rows = [{name: _cell(row.get(name)) for name in header} for row in _to_rows(records, entity)]

    # (2) Ensure output directory exists
    out_dir = out_path.parent
    out_dir.mkdir(parents=True, exist_ok=True)

    # (3) Atomic write via temporary file replacement
    tmp_fd, tmp_name = tempfile.mkstemp(dir=str(out_dir), suffix=".tmp", text=True)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=header)
            writer.writeheader()
            writer.writerows(rows)
        os.replace(tmp_name, out_path)
    except OSError as e:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise ExportError(
            f"Failed to write {out_path}: {e}",
            source="export.write_records_csv",
            suggested_action="Check output directory permissions and disk space.",
        ) from e

    logger.info("Exported %d %s record(s) to %s", len(rows), entity.value, out_path)
    return out_path


__all__ = ["write_records_csv"]
