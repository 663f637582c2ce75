"""
@brief
Pydantic data models for the datarules validation engine.

@details
Defines the canonical contracts shared by every validator:
    - ValidationIssue: one row-level finding (error or warning)
    - EntityCollection / Dataset: in-memory rows of clients, workers, tasks
    - Config: runtime configuration (from datarules.yaml)

Rows themselves stay plain mappings: the validators inspect them key by key
and never require a fixed shape, so unknown columns pass through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

CellValue = Union[str, int, float, None]
Row = Mapping[str, CellValue]


class EntityType(str, Enum):
    """The three managed record kinds."""

    CLIENTS = "clients"
    WORKERS = "workers"
    TASKS = "tasks"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields, serializes with camelCase aliases (the wire
    format used by the rule-authoring UI) and accepts either spelling on input.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values
        "alias_generator": to_camel,
    }


class ValidationIssue(_StrictBaseModel):
    """
    @brief
    One validation finding attributed to a row and column.

    @details
    Produced fresh on every validation pass and never mutated afterwards.
    `row_index` is the position inside the current in-memory row sequence.
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    row_index: int = Field(..., ge=0, description="Position of the row in its collection")
    column: str = Field(..., description="Column that triggered the finding")
    error: str = Field(..., description="Human-readable message")
    severity: Severity = Field(..., description="error blocks export, warning is advisory")


def issue(row_index: int, column: str, message: str, severity: Severity) -> ValidationIssue:
    """Shorthand constructor used by every check."""
    return ValidationIssue(row_index=row_index, column=column, error=message, severity=severity)


# ------------------------------------------------------------
# In-memory dataset
# ------------------------------------------------------------
@dataclass(slots=True)
class EntityCollection:
    """
    Ordered rows of one entity kind plus upload metadata.

    Fields:
        entity_type: Which schema applies to the rows.
        rows: Mutable row sequence; row position is the identity used in issues.
        file_name: Originating file name (informational).
        header_mapping: Original header -> canonical column name.
    """

    entity_type: EntityType
    rows: list[dict[str, CellValue]] = field(default_factory=list)
    file_name: str | None = None
    header_mapping: dict[str, str] = field(default_factory=dict)

    def set_cell(self, index: int, column: str, value: CellValue) -> None:
        """Single-cell edit. Callers re-run validation afterwards."""
        self.rows[index][column] = value

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(slots=True)
class Dataset:
    clients: EntityCollection = field(
        default_factory=lambda: EntityCollection(EntityType.CLIENTS)
    )
    workers: EntityCollection = field(
        default_factory=lambda: EntityCollection(EntityType.WORKERS)
    )
    tasks: EntityCollection = field(default_factory=lambda: EntityCollection(EntityType.TASKS))

    def collection(self, entity_type: EntityType | str) -> EntityCollection:
        return getattr(self, EntityType(entity_type).value)

    def is_complete(self) -> bool:
        """True once all three collections hold at least one row."""
        return bool(self.clients.rows and self.workers.rows and self.tasks.rows)


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class ChecksConfig(_StrictBaseModel):
    """
    @brief
    Toggles for the individual dataset checks.

    @details
    Every check is enabled by default. Disabled checks are skipped and
    reported as such in the dataset report.
    """

    required_fields: bool = True
    duplicate_ids: bool = True
    malformed_lists: bool = True
    out_of_range: bool = True
    broken_json: bool = True
    unknown_references: bool = True
    skill_coverage: bool = True
    phase_slot_saturation: bool = True


class ReportConfig(_StrictBaseModel):
    """
    @brief
    Controls report persistence and exit policy of the run script.
    """

    write_report: bool = True
    fail_on_warnings: bool = False
    filename: str = "validation_report.json"


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from datarules.yaml.
    """

    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    cross_entity: bool = Field(
        True, description="Run cross-entity checks once all three collections are populated"
    )
    report: ReportConfig = Field(default_factory=ReportConfig)
    output_dir: str = "data/output"


__all__ = [
    "CellValue",
    "ChecksConfig",
    "Config",
    "Dataset",
    "EntityCollection",
    "EntityType",
    "ReportConfig",
    "Row",
    "Severity",
    "ValidationIssue",
    "issue",
]
