# src/alchemist/dataloader/records_loader.py
from __future__ import annotations

import csv
import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from alchemist.dataloader.types import LoadResult, Record
from alchemist.errors import DataError
from alchemist.schemas.models import Client, EntityType, Task, Worker
from alchemist.validator.passes import COLUMNS

logger = logging.getLogger(__name__)

MODELS: dict[EntityType, type[Record]] = {
    EntityType.CLIENT: Client,
    EntityType.WORKER: Worker,
    EntityType.TASK: Task,
}

INTEGER_COLUMNS = frozenset({"PriorityLevel", "MaxLoadPerPhase", "Duration", "MaxConcurrent"})

# Canonical column -> accepted header spellings (compared after normalization).
HEADER_VARIANTS: dict[EntityType, dict[str, tuple[str, ...]]] = {
    EntityType.CLIENT: {
        "ClientID": ("clientid", "client_id", "id", "client id"),
        "ClientName": ("clientname", "client_name", "name", "client name"),
        "PriorityLevel": ("prioritylevel", "priority_level", "priority", "level"),
        "RequestedTaskIDs": ("requestedtaskids", "requested_task_ids", "tasks", "taskids"),
        "GroupTag": ("grouptag", "group_tag", "group", "tag"),
        "AttributesJSON": ("attributesjson", "attributes_json", "attributes", "json"),
    },
    EntityType.WORKER: {
        "WorkerID": ("workerid", "worker_id", "id", "worker id"),
        "WorkerName": ("workername", "worker_name", "name", "worker name"),
        "Skills": ("skills", "skill", "capabilities"),
        "AvailableSlots": ("availableslots", "available_slots", "slots", "available"),
        "MaxLoadPerPhase": ("maxloadperphase", "max_load_per_phase", "maxload", "load"),
        "WorkerGroup": ("workergroup", "worker_group", "group"),
        "QualificationLevel": ("qualificationlevel", "qualification_level", "qualification", "level"),
    },
    EntityType.TASK: {
        "TaskID": ("taskid", "task_id", "id", "task id"),
        "TaskName": ("taskname", "task_name", "name", "task name"),
        "Category": ("category", "cat", "type"),
        "Duration": ("duration", "dur", "time"),
        "RequiredSkills": ("requiredskills", "required_skills", "skills", "required"),
        "PreferredPhases": ("preferredphases", "preferred_phases", "phases", "preferred"),
        "MaxConcurrent": ("maxconcurrent", "max_concurrent", "concurrent", "max"),
    },
}

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _norm_header(header: str) -> str:
    return _NON_ALNUM.sub("", header.lower())


def map_headers(headers: Iterable[str], entity: EntityType) -> dict[str, str]:
    """
    @brief
    Map raw CSV headers onto canonical column names.

    @details
    Headers are lower-cased and stripped of non-alphanumerics, then matched
    against the entity's accepted spellings in canonical column order. When
    several raw headers resolve to the same column, the first one wins.
    Unmapped headers are ignored.

    @returns
        Mapping raw header -> canonical column name.
    """
    lookup: dict[str, str] = {}
    for canonical, variants in HEADER_VARIANTS[entity].items():
        for variant in variants:
            lookup.setdefault(_norm_header(variant), canonical)

    mapped: dict[str, str] = {}
    taken: set[str] = set()
    for raw in headers:
        canonical = lookup.get(_norm_header(raw or ""))
        if canonical is None or canonical in taken:
            continue
        mapped[raw] = canonical
        taken.add(canonical)
    return mapped


_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+(?:\.0*)?")


def parse_int(text: str) -> int:
    """Parse '3' or '3.0' as 3. Raises ValueError for anything else, including '1_000'."""
    stripped = text.strip()
    if not _INTEGER_TEXT.fullmatch(stripped):
        raise ValueError(f"not an integer: {text!r}")
    return int(stripped.split(".", 1)[0])


class RecordsLoader:
    """
    CSV -> LoadResult[Client | Worker | Task].

    Rules:
      - Format: UTF-8 CSV, delimiter=','
      - Headers are mapped fuzzily onto canonical columns (see HEADER_VARIANTS)
      - The entity's id column must be present in the header
      - Every data row becomes a record; nothing is rejected here:
          * blank cell                 -> "" for text, None for integers
          * unparsable integer         -> None + issue 'invalid_integer'
      - Duplicates, ranges and references are the validator's concern

    Fatal errors (raise DataError):
      - file missing / unreadable
      - CSV has no header
      - id column cannot be mapped
    """

    def load(self, path: Path, entity: EntityType | str) -> LoadResult:
        entity = EntityType(entity)
        header, rows = self._read_csv(path)
        mapping = self._validate_header(header, entity)
        result = self._rows_to_result(rows, mapping, entity)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_csv(self, path: Path) -> tuple[list[str], list[dict[str, Any]]]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="RecordsLoader._read_csv",
                suggested_action="Pass a pathlib.Path pointing to the CSV file.",
            )
        if not path.exists():
            raise DataError(
                message=f"Input CSV not found: {path}",
                source="RecordsLoader._read_csv",
                suggested_action="Verify file path and ensure the CSV is present.",
            )

        try:
            with path.open("r", encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f, delimiter=",")
                if reader.fieldnames is None:
                    raise DataError(
                        message="CSV has no header row.",
                        source="RecordsLoader._read_csv",
                        suggested_action="Ensure the first line contains column names.",
                    )
                return list(reader.fieldnames), list(reader)
        except UnicodeDecodeError as e:
            raise DataError(
                message=f"CSV is not valid UTF-8: {e}",
                source="RecordsLoader._read_csv",
                suggested_action="Re-save the file with UTF-8 encoding.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read CSV: {e}",
                source="RecordsLoader._read_csv",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

    def _validate_header(self, header: Sequence[str], entity: EntityType) -> dict[str, str]:
        mapping = map_headers(header, entity)
        id_column = COLUMNS[entity][0].name
        if id_column not in mapping.values():
            raise DataError(
                message=f"Invalid CSV header: no column maps to {id_column}",
                source="RecordsLoader._validate_header",
                suggested_action=f"Add an identifier column named {id_column}.",
            )
        return mapping

    def _rows_to_result(
        self, rows: list[dict[str, Any]], mapping: dict[str, str], entity: EntityType
    ) -> LoadResult:
        model = MODELS[entity]
        records: list[Record] = []
        issues: list[dict[str, Any]] = []

        for line_no, row in enumerate(rows, start=2):  # header = line 1
            data: dict[str, Any] = {col.name: "" for col in COLUMNS[entity]}
            for raw, canonical in mapping.items():
                cell = row.get(raw)
                data[canonical] = cell.strip() if isinstance(cell, str) else ""

            for name in (c.name for c in COLUMNS[entity] if c.name in INTEGER_COLUMNS):
                text = data[name]
                if not text:
                    data[name] = None
                    continue
                try:
                    data[name] = parse_int(text)
                except ValueError:
                    data[name] = None
                    issues.append(
                        {
                            "kind": "invalid_integer",
                            "line_no": line_no,
                            "column": name,
                            "value": text,
                            "message": f"{name} is not an integer: {text!r}",
                        }
                    )

            records.append(model.model_validate(data))

        return LoadResult(entity=entity, records=records, issues=issues, total_rows=len(rows))

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "RecordsLoader OK: %d %s record(s) from %s",
                len(result.records),
                result.entity.value,
                path,
            )
        else:
            logger.warning(
                "RecordsLoader: %d coercion issue(s) across %d row(s) in %s",
                len(result.issues),
                result.total_rows,
                path,
            )


__all__ = ["HEADER_VARIANTS", "RecordsLoader", "map_headers", "parse_int"]
