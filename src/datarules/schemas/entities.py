# src/datarules/schemas/entities.py
"""
Static schema table for the three entity kinds.

Each entity schema is an ordered list of field descriptors consumed by one
generic required-fields routine. Numeric ranges live in a separate table
because they are enforced by the out-of-range check. A field `minimum` is
the schema floor itself: values below it are errors of the required-fields
check, on top of any range finding.
"""

from __future__ import annotations

from dataclasses import dataclass

from datarules.schemas.models import EntityType, Severity

STRING = "string"
INTEGER = "integer"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str = STRING
    required: bool = True
    message: str = ""
    minimum: int | None = None


@dataclass(frozen=True)
class RangeSpec:
    name: str
    minimum: int
    maximum: int | None
    message: str
    severity: Severity


@dataclass(frozen=True)
class EntitySchema:
    id_field: str
    fields: tuple[FieldSpec, ...]
    ranges: tuple[RangeSpec, ...] = ()
    list_fields: tuple[str, ...] = ()

ENTITY_SCHEMAS: dict[EntityType, EntitySchema] = {
    EntityType.CLIENTS: EntitySchema(
        id_field="ClientID",
        fields=(
            FieldSpec("ClientID", message="ClientID is required"),
            FieldSpec("ClientName", message="ClientName is required"),
            FieldSpec("PriorityLevel", INTEGER, message="PriorityLevel must be between 1-5"),
            FieldSpec("RequestedTaskIDs", required=False),
            FieldSpec("GroupTag", message="GroupTag is required"),
            FieldSpec("AttributesJSON", required=False),
        ),
        ranges=(
            RangeSpec("PriorityLevel", 1, 5, "PriorityLevel must be between 1-5", Severity.ERROR),
        ),
        list_fields=("RequestedTaskIDs",),
    ),
    EntityType.WORKERS: EntitySchema(
        id_field="WorkerID",
        fields=(
            FieldSpec("WorkerID", message="WorkerID is required"),
            FieldSpec("WorkerName", message="WorkerName is required"),
            FieldSpec("Skills", message="Skills are required"),
            FieldSpec("AvailableSlots", message="AvailableSlots are required"),
            FieldSpec(
                "MaxLoadPerPhase", INTEGER, message="MaxLoadPerPhase must be at least 1", minimum=1
            ),
            FieldSpec("WorkerGroup", message="WorkerGroup is required"),
            # Lenient in the upstream data: non-numeric values default to level 1.
            FieldSpec("QualificationLevel", INTEGER, required=False),
        ),
        ranges=(
            RangeSpec(
                "MaxLoadPerPhase", 1, 10, "MaxLoadPerPhase must be between 1-10", Severity.WARNING
            ),
        ),
        list_fields=("Skills",),
    ),
    EntityType.TASKS: EntitySchema(
        id_field="TaskID",
        fields=(
            FieldSpec("TaskID", message="TaskID is required"),
            FieldSpec("TaskName", message="TaskName is required"),
            FieldSpec("Category", message="Category is required"),
            FieldSpec("Duration", INTEGER, message="Duration must be at least 1"),
            FieldSpec("RequiredSkills", message="RequiredSkills are required"),
            FieldSpec("PreferredPhases", message="PreferredPhases are required"),
            FieldSpec(
                "MaxConcurrent", INTEGER, message="MaxConcurrent must be at least 1", minimum=1
            ),
        ),
        ranges=(
            RangeSpec("Duration", 1, None, "Duration must be at least 1", Severity.ERROR),
            RangeSpec(
                "MaxConcurrent", 1, 100, "MaxConcurrent must be between 1-100", Severity.WARNING
            ),
        ),
        list_fields=("RequiredSkills",),
    ),
}


def schema_for(entity_type: EntityType | str) -> EntitySchema:
    return ENTITY_SCHEMAS[EntityType(entity_type)]


__all__ = ["ENTITY_SCHEMAS", "EntitySchema", "FieldSpec", "RangeSpec", "schema_for"]
