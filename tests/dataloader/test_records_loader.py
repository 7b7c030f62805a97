# tests/dataloader/test_records_loader.py
import textwrap
from pathlib import Path

import pytest

from alchemist.dataloader.records_loader import RecordsLoader, map_headers, parse_int
from alchemist.dataloader.types import LoadResult
from alchemist.errors import DataError
from alchemist.schemas.models import Client, EntityType, Task, Worker


def _write_csv(tmp_path: Path, name: str, text: str) -> Path:
    """Helper: writes plain text CSV content into a temporary file."""
    p = tmp_path / name
    p.write_text(textwrap.dedent(text).strip() + "\n", encoding="utf-8")
    return p


# ------------------------------------------------------------------------------
# Happy path
# ------------------------------------------------------------------------------
def test_valid_clients_csv_returns_typed_records(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "clients.csv",
        """
        ClientID,ClientName,PriorityLevel,RequestedTaskIDs,GroupTag,AttributesJSON
        C1,Acme,3,"T1,T2",enterprise,"{""region"": ""north""}"
        C2,Globex,5,T3,retail,{}
        """,
    )

    result = RecordsLoader().load(csv_path, EntityType.CLIENT)

    assert isinstance(result, LoadResult)
    assert result.success is True
    assert result.total_rows == 2
    assert all(isinstance(c, Client) for c in result.records)
    first = result.records[0]
    assert first.client_id == "C1"
    assert first.priority_level == 3
    assert first.requested_task_ids == "T1,T2"
    assert first.attributes_json == '{"region": "north"}'


def test_loader_accepts_entity_as_string(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "workers.csv",
        """
        WorkerID,WorkerName,Skills,AvailableSlots,MaxLoadPerPhase,WorkerGroup,QualificationLevel
        W1,Ann,"welding,painting","[1, 2]",2,day,senior
        """,
    )

    result = RecordsLoader().load(csv_path, "worker")

    worker = result.records[0]
    assert isinstance(worker, Worker)
    assert worker.available_slots == "[1, 2]"
    assert worker.max_load_per_phase == 2


def test_header_variants_and_missing_columns(tmp_path: Path):
    """
    @brief
    Fuzzy header mapping with partially missing columns.

    @details
    Headers such as 'task_id', 'Required Skills' and 'phases' are mapped onto
    canonical columns; columns absent from the file become blank text or
    None integers, which the validator later reports as missing.
    """
    # --- Arrange ---
    csv_path = _write_csv(
        tmp_path,
        "tasks.csv",
        """
        task_id,Task Name,Required Skills,phases,duration
        T1,Cut,welding,"[1, 2]",3.0
        """,
    )

    # --- Act ---
    result = RecordsLoader().load(csv_path, EntityType.TASK)

    # --- Assert ---
    task = result.records[0]
    assert isinstance(task, Task)
    assert (task.task_id, task.task_name, task.required_skills) == ("T1", "Cut", "welding")
    assert task.preferred_phases == "[1, 2]"
    assert task.duration == 3
    assert task.category == ""
    assert task.max_concurrent is None


def test_cells_are_trimmed_and_blank_integers_become_none(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "clients.csv",
        """
        ClientID,ClientName,PriorityLevel,RequestedTaskIDs,GroupTag,AttributesJSON
        C1 ,  Acme  ,,T1,, {}
        """,
    )

    client = RecordsLoader().load(csv_path, EntityType.CLIENT).records[0]

    assert client.client_id == "C1"
    assert client.client_name == "Acme"
    assert client.priority_level is None
    assert client.group_tag == ""
    assert client.attributes_json == "{}"


def test_utf8_bom_is_ignored(tmp_path: Path):
    p = tmp_path / "bom.csv"
    p.write_bytes(b"\xef\xbb\xbfClientID,ClientName\nC1,Acme\n")

    result = RecordsLoader().load(p, EntityType.CLIENT)

    assert result.records[0].client_id == "C1"


# ------------------------------------------------------------------------------
# Row-level issues (non-fatal, rows are kept)
# ------------------------------------------------------------------------------
def test_invalid_integers_are_recorded_and_rows_kept(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "tasks.csv",
        """
        TaskID,TaskName,Category,Duration,RequiredSkills,PreferredPhases,MaxConcurrent
        T1,Cut,fab,two,welding,[1],1.5
        T2,Weld,fab,1,welding,[2],1
        """,
    )

    result = RecordsLoader().load(csv_path, EntityType.TASK)

    assert result.success is False
    assert result.total_rows == 2
    assert [t.task_id for t in result.records] == ["T1", "T2"]
    assert result.records[0].duration is None
    assert result.records[0].max_concurrent is None
    assert [(i["kind"], i["line_no"], i["column"], i["value"]) for i in result.issues] == [
        ("invalid_integer", 2, "Duration", "two"),
        ("invalid_integer", 2, "MaxConcurrent", "1.5"),
    ]


def test_digit_separators_are_not_silently_coerced(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "clients.csv",
        """
        ClientID,PriorityLevel
        C1,1_000
        """,
    )

    result = RecordsLoader().load(csv_path, EntityType.CLIENT)

    assert result.records[0].priority_level is None
    assert [(i["kind"], i["value"]) for i in result.issues] == [("invalid_integer", "1_000")]


def test_duplicates_are_left_to_the_validator(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "clients.csv",
        """
        ClientID,ClientName
        C1,Acme
        C1,Acme again
        """,
    )

    result = RecordsLoader().load(csv_path, EntityType.CLIENT)

    assert result.success is True
    assert [c.client_id for c in result.records] == ["C1", "C1"]


# ------------------------------------------------------------------------------
# Fatal errors
# ------------------------------------------------------------------------------
def test_missing_file_raises_dataerror(tmp_path: Path):
    with pytest.raises(DataError) as e:
        RecordsLoader().load(tmp_path / "nope.csv", EntityType.CLIENT)

    assert "not found" in str(e.value)


def test_non_path_argument_raises_dataerror(tmp_path: Path):
    with pytest.raises(DataError) as e:
        RecordsLoader().load(str(tmp_path / "clients.csv"), EntityType.CLIENT)

    assert "Invalid path type" in str(e.value)


def test_empty_file_raises_dataerror(tmp_path: Path):
    p = tmp_path / "empty.csv"
    p.write_text("", encoding="utf-8")

    with pytest.raises(DataError) as e:
        RecordsLoader().load(p, EntityType.WORKER)

    assert "no header" in str(e.value)


def test_non_utf8_file_raises_dataerror(tmp_path: Path):
    p = tmp_path / "latin1.csv"
    p.write_bytes(b"ClientID,ClientName\nC1,\xff\xfe bad\n")

    with pytest.raises(DataError) as e:
        RecordsLoader().load(p, EntityType.CLIENT)

    assert "UTF-8" in str(e.value)
    assert e.value.source == "RecordsLoader._read_csv"


def test_unmapped_id_column_raises_dataerror(tmp_path: Path):
    csv_path = _write_csv(
        tmp_path,
        "workers.csv",
        """
        Nickname,Skills
        Ann,welding
        """,
    )

    with pytest.raises(DataError) as e:
        RecordsLoader().load(csv_path, EntityType.WORKER)

    assert "WorkerID" in str(e.value)


def test_unknown_entity_raises_value_error(tmp_path: Path):
    csv_path = _write_csv(tmp_path, "x.csv", "ClientID\nC1")

    with pytest.raises(ValueError):
        RecordsLoader().load(csv_path, "supplier")


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------
def test_map_headers_first_match_wins():
    mapping = map_headers(["ID", "client_id", "Priority", "unrelated"], EntityType.CLIENT)

    assert mapping == {"ID": "ClientID", "Priority": "PriorityLevel"}


@pytest.mark.parametrize("text, expected", [("3", 3), ("-2", -2), ("4.0", 4), (" 7 ", 7)])
def test_parse_int_accepts_integral_text(text, expected):
    assert parse_int(text) == expected


@pytest.mark.parametrize("text", ["x", "1.5", "nan", "inf", "", "1_000", "1e3", "\u0663"])
def test_parse_int_rejects_other_text(text):
    with pytest.raises(ValueError):
        parse_int(text)
