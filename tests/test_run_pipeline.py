import json
import shutil
from pathlib import Path

import pytest
import yaml

from alchemist.schemas.models import Config, EntityType, ExportConfig, ValidationConfig
from scripts.run import main, run_pipeline

ROOT = Path(__file__).resolve().parents[1]
SAMPLE = ROOT / "data" / "sample"


def _inputs(base: Path) -> dict[EntityType, Path]:
    return {
        EntityType.CLIENT: base / "clients.csv",
        EntityType.WORKER: base / "workers.csv",
        EntityType.TASK: base / "tasks.csv",
    }


@pytest.fixture()
def sample_copy(tmp_path: Path) -> Path:
    """Copies the bundled sample record sets into a scratch directory."""
    dst = tmp_path / "input"
    shutil.copytree(SAMPLE, dst)
    return dst


def test_run_pipeline_on_sample_data(tmp_path: Path):
    """
    @brief
    End-to-end run over the bundled sample data.

    @details
    The sample record sets are consistent, so the run must be valid with no
    diagnostics, write validation_report.json and skip record export by
    default.
    """
    # --- Arrange ---
    output_dir = tmp_path / "out"

    # --- Act ---
    result = run_pipeline(Config(), _inputs(SAMPLE), output_dir)

    # --- Assert ---
    assert result["valid"] is True
    assert result["counts"] == {"errors": 0, "warnings": 0}
    arts = result["artifacts"]
    assert arts["validation_report"] == output_dir / "validation_report.json"
    assert arts["load_issues"] == {}
    assert arts["records"] == {}

    report = json.loads(arts["validation_report"].read_text(encoding="utf-8"))
    assert report["summary"]["total_clients"] == 3
    assert report["summary"]["groups"]["worker"] == {"day": 2, "night": 1}


def test_run_pipeline_reports_issues_and_exports(sample_copy: Path, tmp_path: Path):
    # --- Arrange ---
    def edit(path: Path, old: str, new: str) -> None:
        path.write_text(path.read_text(encoding="utf-8").replace(old, new), encoding="utf-8")

    edit(sample_copy / "tasks.csv", "T3,Final check,quality,1", "T3,Final check,quality,x")
    edit(sample_copy / "clients.csv", "C3,Initech,2", "C3,Initech,9")
    cfg = Config(export=ExportConfig(write_records=True))
    output_dir = tmp_path / "out"

    # --- Act ---
    result = run_pipeline(cfg, _inputs(sample_copy), output_dir)

    # --- Assert ---
    assert result["valid"] is False
    arts = result["artifacts"]
    assert set(arts["load_issues"]) == {"task"}
    assert arts["load_issues"]["task"].exists()
    assert sorted(arts["records"]) == ["client", "task", "worker"]
    assert arts["records"]["task"] == output_dir / "tasks.csv"

    report = json.loads(arts["validation_report"].read_text(encoding="utf-8"))
    fields = {(e["entityId"], e["field"]) for e in report["errors"]}
    assert ("C3", "PriorityLevel") in fields
    assert ("T3", "Duration") in fields


def test_run_pipeline_ignores_stale_report_when_writing_is_disabled(tmp_path: Path):
    # --- Arrange ---
    output_dir = tmp_path / "out"
    output_dir.mkdir()
    stale = output_dir / "validation_report.json"
    stale.write_text('{"valid": false}', encoding="utf-8")
    cfg = Config(validation=ValidationConfig(write_report=False))

    # --- Act ---
    result = run_pipeline(cfg, _inputs(SAMPLE), output_dir)

    # --- Assert ---
    assert result["artifacts"]["validation_report"] is None
    assert stale.read_text(encoding="utf-8") == '{"valid": false}'


def test_main_returns_zero_for_valid_sample(tmp_path: Path):
    # --- Arrange ---
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        yaml.safe_dump(
            {
                "clients_csv": str(SAMPLE / "clients.csv"),
                "workers_csv": str(SAMPLE / "workers.csv"),
                "tasks_csv": str(SAMPLE / "tasks.csv"),
            }
        ),
        encoding="utf-8",
    )
    out = tmp_path / "out"

    # --- Act ---
    code = main(["--config", str(cfg_path), "--output", str(out)])

    # --- Assert ---
    assert code == 0
    assert (out / "validation_report.json").exists()


def test_main_cli_paths_override_config(sample_copy: Path, tmp_path: Path):
    # --- Arrange ---
    (sample_copy / "bad_clients.csv").write_text(
        "ClientID,ClientName,PriorityLevel,RequestedTaskIDs,GroupTag,AttributesJSON\n"
        "C1,Acme,3,T9,smb,{}\n",
        encoding="utf-8",
    )
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "clients_csv: input/clients.csv\n"
        "workers_csv: input/workers.csv\n"
        "tasks_csv: input/tasks.csv\n",
        encoding="utf-8",
    )
    out = tmp_path / "out"

    # --- Act ---
    valid_code = main(["--config", str(cfg_path), "--output", str(out)])
    invalid_code = main(
        [
            "--config",
            str(cfg_path),
            "--clients",
            str(sample_copy / "bad_clients.csv"),
            "--output",
            str(out),
        ]
    )

    # --- Assert ---
    assert valid_code == 0
    assert invalid_code == 1


def test_main_returns_one_on_config_error(tmp_path: Path):
    code = main(["--config", str(tmp_path / "missing.yaml")])

    assert code == 1


def test_main_returns_one_when_inputs_are_unset(tmp_path: Path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("output_dir: out\n", encoding="utf-8")

    assert main(["--config", str(cfg_path)]) == 1


def test_main_returns_one_for_non_utf8_input(sample_copy: Path, tmp_path: Path):
    (sample_copy / "clients.csv").write_bytes(b"ClientID,ClientName\nC1,\xff\xfe bad\n")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "clients_csv: input/clients.csv\n"
        "workers_csv: input/workers.csv\n"
        "tasks_csv: input/tasks.csv\n",
        encoding="utf-8",
    )

    assert main(["--config", str(cfg_path), "--output", str(tmp_path / "out")]) == 1
