# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from alchemist.dataloader.config_loader import ConfigLoader
from alchemist.dataloader.postload_handler import LoadResultHandler
from alchemist.dataloader.records_loader import RecordsLoader
from alchemist.errors import AlchemistError
from alchemist.export.records_export import write_records_csv
from alchemist.schemas.models import Config, EntityType
from alchemist.validator import validate_dataset


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Sets the default logging level to INFO and defines a simple console format.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the validation pipeline.

    @details
    Input CSVs given on the command line override the paths in the config file.
    """
    parser = argparse.ArgumentParser(
        prog="alchemist-validate",
        description="Validate client/worker/task record sets: load → validate → report → export",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to config YAML (default: config/config.yaml)",
    )
    parser.add_argument("--clients", type=str, default=None, help="Path to clients CSV")
    parser.add_argument("--workers", type=str, default=None, help="Path to workers CSV")
    parser.add_argument("--tasks", type=str, default=None, help="Path to tasks CSV")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for artifacts (default: output_dir from config)",
    )
    return parser.parse_args(argv)


def run_pipeline(
    cfg: Config, inputs: dict[EntityType, Path], output_dir: Path
) -> dict[str, Any]:
    """
    @brief
    Executes the validation pipeline.

    @details
    (1) Load the three record sets, persisting coercion issues if any.
    (2) Validate them and write validation_report.json.
    (3) Optionally export the loaded records back to canonical CSV.

    @returns
        Dictionary with validity flag, diagnostic counts and artifact paths.

    @raises
        AlchemistError
            On unreadable inputs or report/export write failures.
    """
    t0 = time.perf_counter()
    output_dir.mkdir(parents=True, exist_ok=True)

    # (1) Load record sets
    loader = RecordsLoader()
    handler = LoadResultHandler(output_dir=output_dir)
    records: dict[EntityType, list[Any]] = {}
    load_issues: dict[str, Path] = {}
    for entity in (EntityType.CLIENT, EntityType.WORKER, EntityType.TASK):
        logging.info("Loading %s records: %s", entity.value, inputs[entity])
        result = loader.load(inputs[entity], entity)
        records[entity] = handler.handle(result)
        if not result.success:
            load_issues[entity.value] = handler.issues_path(result)

    # (2) Validate
    logging.info("Validating…")
    report = validate_dataset(
        records[EntityType.CLIENT],
        records[EntityType.WORKER],
        records[EntityType.TASK],
        cfg,
        write_report=cfg.validation.write_report,
        out_dir=output_dir,
    )
    report_path = output_dir / "validation_report.json" if cfg.validation.write_report else None

    # (3) Export
    exported: dict[str, Path] = {}
    if cfg.export.write_records:
        for entity, rows in records.items():
            exported[entity.value] = write_records_csv(
                rows, entity, output_dir / f"{entity.value}s.csv"
            )

    logging.info(
        "Pipeline finished in %.2f s: %d error(s), %d warning(s)",
        time.perf_counter() - t0,
        report["counts"]["errors"],
        report["counts"]["warnings"],
    )

    return {
        "valid": report["valid"],
        "counts": report["counts"],
        "artifacts": {
            "validation_report": report_path,
            "load_issues": load_issues,
            "records": exported,
        },
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point for the validation pipeline.

    @details
    Exit codes:
      0 – data set valid
      1 – invalid data set or controlled failure (config/data/export)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    try:
        config_path = Path(args.config)
        loader = ConfigLoader()
        cfg = loader.load(config_path)
        overrides = {
            "clients_csv": args.clients,
            "workers_csv": args.workers,
            "tasks_csv": args.tasks,
        }
        # Command-line paths are relative to the working directory, not the config file
        cfg = cfg.model_copy(
            update={k: str(Path(v).resolve()) for k, v in overrides.items() if v}
        )
        inputs = loader.input_paths(cfg, base_dir=config_path.parent)
        output_dir = Path(args.output or cfg.output_dir or "data/output")

        result = run_pipeline(cfg, inputs, output_dir)
        return 0 if result["valid"] else 1

    except AlchemistError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
