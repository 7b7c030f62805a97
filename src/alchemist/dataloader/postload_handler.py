# src/alchemist/dataloader/postload_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path

from alchemist.dataloader.types import LoadResult, Record

logger = logging.getLogger(__name__)


class LoadResultHandler:
    """
    @brief
    Passes loaded records downstream and persists coercion issues if any.

    @details
    Unlike a hard gate, the handler always returns the records: malformed
    data is what the validator exists to report. When the loader recorded
    coercion issues, they are written to 'load_issues_<entity>.json' inside
    output_dir so the original cell values are not lost.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def handle(self, result: LoadResult) -> list[Record]:
        # (1) Clean load
        if result.success:
            logger.info(
                "PostLoad: %d %s record(s) ready for validation.",
                len(result.records),
                result.entity.value,
            )
            return result.records

        # (2) Persist issues next to the other artifacts
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.issues_path(result)
        try:
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(result.issues, f, ensure_ascii=False, indent=2)
            logger.error(
                "PostLoad: %d coercion issue(s) in %s data. See %s",
                len(result.issues),
                result.entity.value,
                out_path,
            )
        except OSError as e:
            logger.error("PostLoad: failed to write issue report: %s", e)

        return result.records

    def issues_path(self, result: LoadResult) -> Path:
        return self.output_dir / f"load_issues_{result.entity.value}.json"
