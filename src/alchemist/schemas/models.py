"""
@brief
Pydantic data models for the Alchemist validation project.

@details
Defines the canonical model types:
    - Client, Worker, Task: one typed input record each (from clients/workers/tasks CSV)
    - Diagnostic: one validation finding located by entity, field, row and column
    - ValidationResult: ordered errors and warnings of a single validation run
    - Config: runtime configuration (from config.yaml)

Record attributes are snake_case; the original column names are kept as
aliases so records can be populated from, and dumped back to, the tabular
headers. Text fields default to "" and integer fields to None, which is how
an absent or uncoercible cell reaches the validation engine.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

GLOBAL_ENTITY_ID = "GLOBAL"


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and accepts population by attribute name or alias.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Store raw enum values
    }


class EntityType(str, Enum):
    CLIENT = "client"
    WORKER = "worker"
    TASK = "task"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


# ------------------------------------------------------------
# Input records
# ------------------------------------------------------------
class Client(_StrictBaseModel):
    """
    @brief
    Represents one client record from clients.csv.

    @params
        client_id : str
            Unique identifier of the client.
        priority_level : int | None
            Priority in the expected range 1..5.
        requested_task_ids : str
            Comma-separated task identifiers, parsed by the validator.
        attributes_json : str
            Free-form attributes expected to be a JSON object or array.
    """

    client_id: str = Field("", alias="ClientID", description="Unique identifier")
    client_name: str = Field("", alias="ClientName", description="Display name")
    priority_level: int | None = Field(None, alias="PriorityLevel", description="Priority 1..5")
    requested_task_ids: str = Field(
        "", alias="RequestedTaskIDs", description="Comma-separated task identifiers"
    )
    group_tag: str = Field("", alias="GroupTag", description="Client group label")
    attributes_json: str = Field("", alias="AttributesJSON", description="JSON attributes blob")


class Worker(_StrictBaseModel):
    """
    @brief
    Represents one worker record from workers.csv.

    @details
    AvailableSlots holds the JSON text of an array of positive phase numbers.
    """

    worker_id: str = Field("", alias="WorkerID", description="Unique identifier")
    worker_name: str = Field("", alias="WorkerName", description="Display name")
    skills: str = Field("", alias="Skills", description="Comma-separated skill list")
    available_slots: str = Field(
        "", alias="AvailableSlots", description="JSON array of available phase numbers"
    )
    max_load_per_phase: int | None = Field(
        None, alias="MaxLoadPerPhase", description="Maximum load per phase (>= 1)"
    )
    worker_group: str = Field("", alias="WorkerGroup", description="Worker group label")
    qualification_level: str = Field(
        "", alias="QualificationLevel", description="Qualification level"
    )


class Task(_StrictBaseModel):
    """
    @brief
    Represents one task record from tasks.csv.

    @details
    Duration is expressed in phases. PreferredPhases holds the JSON text of an
    array of positive phase numbers.
    """

    task_id: str = Field("", alias="TaskID", description="Unique identifier")
    task_name: str = Field("", alias="TaskName", description="Display name")
    category: str = Field("", alias="Category", description="Task category")
    duration: int | None = Field(None, alias="Duration", description="Duration in phases (>= 1)")
    required_skills: str = Field(
        "", alias="RequiredSkills", description="Comma-separated required skills"
    )
    preferred_phases: str = Field(
        "", alias="PreferredPhases", description="JSON array of preferred phase numbers"
    )
    max_concurrent: int | None = Field(
        None, alias="MaxConcurrent", description="Maximum concurrent executions (>= 1)"
    )


# ------------------------------------------------------------
# Validation output
# ------------------------------------------------------------
class Diagnostic(_StrictBaseModel):
    """
    @brief
    One validation finding, addressable by row and column.

    @details
    Immutable once produced. entity_id is the record identifier, or GLOBAL for
    data-set-wide findings. row_index is the position of the record in its
    input collection; column_index is the fixed position of the field within
    the entity's column schema.
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    entity_type: EntityType = Field(..., alias="entityType")
    entity_id: str = Field(..., alias="entityId")
    field: str
    message: str
    severity: Severity
    row_index: int = Field(..., ge=0, alias="rowIndex")
    column_index: int = Field(..., ge=0, alias="columnIndex")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ValidationResult(BaseModel):
    """
    @brief
    Errors and warnings produced by one validation run, in deterministic order.
    """

    errors: list[Diagnostic] = Field(default_factory=list)
    warnings: list[Diagnostic] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "errors": [d.to_dict() for d in self.errors],
            "warnings": [d.to_dict() for d in self.warnings],
        }


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class ValidationConfig(BaseModel):
    """
    @brief
    Controls behavior of the validation subsystem.

    @details
    Determines whether passes run on a thread pool, whether a report is
    written, and whether warnings should be treated as failures.
    """

    parallel: bool = False
    max_workers: int = Field(4, ge=1, description="Thread pool size when parallel=True")
    write_report: bool = True
    fail_on_warnings: bool = False


class ExportConfig(BaseModel):
    """Controls export of the loaded record sets back to CSV."""

    write_records: bool = False


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.
    """

    clients_csv: str | None = None
    workers_csv: str | None = None
    tasks_csv: str | None = None
    output_dir: str | None = "data/output"
    validation: ValidationConfig = Field(default_factory=ValidationConfig.model_construct)
    export: ExportConfig = Field(default_factory=ExportConfig.model_construct)


__all__ = [
    "GLOBAL_ENTITY_ID",
    "Client",
    "Config",
    "Diagnostic",
    "EntityType",
    "ExportConfig",
    "Severity",
    "Task",
    "ValidationConfig",
    "ValidationResult",
    "Worker",
]
