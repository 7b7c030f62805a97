from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from alchemist.schemas.models import Client, EntityType, Task, Worker

Record = Client | Worker | Task


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of loading one record set.

    Fields:
        entity: Entity type of the loaded records.
        records: Typed records in file order (every data row is kept).
        issues: Coercion issues with per-row context (used for reporting).
                Each item contains: kind, line_no, column, value, message.
        total_rows: Total number of data rows observed in the CSV (excludes header).
    """

    entity: EntityType
    records: list[Record] = field(default_factory=list)
    issues: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0

    @property
    def success(self) -> bool:
        return not self.issues
