# src/datarules/validator/cross_entity.py
"""
Checks spanning the client, worker and task collections.

The caller decides when these run (normally once all three collections are
populated) and re-runs them from scratch after every mutation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from datarules.errors import PhaseFormatError
from datarules.schemas.models import Row, Severity, ValidationIssue, issue
from datarules.validator.fields import (
    cell_text,
    coerce_number,
    is_blank,
    parse_phases,
    split_list,
)

logger = logging.getLogger(__name__)


def validate_unknown_references(
    clients: Sequence[Row], tasks: Sequence[Row], workers: Sequence[Row]
) -> list[ValidationIssue]:
    """
    @brief
    Every task id a client requests must exist in the task collection.

    @details
    `workers` is accepted for signature symmetry with the other
    cross-entity checks and is not consulted.
    """
    valid_task_ids = {cell_text(t.get("TaskID")) for t in tasks} - {""}

    issues: list[ValidationIssue] = []
    for index, client in enumerate(clients):
        for task_id in split_list(client.get("RequestedTaskIDs")):
            if task_id not in valid_task_ids:
                issues.append(
                    issue(
                        index,
                        "RequestedTaskIDs",
                        f"Unknown task reference: {task_id}",
                        Severity.ERROR,
                    )
                )
    return issues


def validate_skill_coverage(
    tasks: Sequence[Row], workers: Sequence[Row]
) -> list[ValidationIssue]:
    """
    @brief
    Every skill a task requires must be held by at least one worker.

    @details
    Skills are compared case-insensitively. One warning per task row lists
    all of its uncovered skills.
    """
    available = {skill.lower() for w in workers for skill in split_list(w.get("Skills"))}

    issues: list[ValidationIssue] = []
    for index, task in enumerate(tasks):
        required = [skill.lower() for skill in split_list(task.get("RequiredSkills"))]
        uncovered = [s for s in dict.fromkeys(required) if s not in available]
        if uncovered:
            issues.append(
                issue(
                    index,
                    "RequiredSkills",
                    f"No workers have skills: {', '.join(uncovered)}",
                    Severity.WARNING,
                )
            )
    return issues


def validate_phase_slot_saturation(
    tasks: Sequence[Row], workers: Sequence[Row]
) -> list[ValidationIssue]:
    """
    @brief
    Compare aggregate task demand against aggregate worker capacity per phase.

    @details
    Demand of a phase is the sum of Duration over tasks whose
    PreferredPhases include it; capacity is the sum of MaxLoadPerPhase over
    workers whose AvailableSlots include it (each worker counts once per
    listed phase). A task with an unparsable PreferredPhases cell gets an
    error. For every phase with demand > capacity, each contributing task
    gets a warning naming the phase and both totals.

    @returns
        Malformed-phase errors in row order, then saturation warnings
        ordered by phase, then row.
    """
    issues: list[ValidationIssue] = []

    # (1) Aggregate demand and remember which task rows contribute
    demand: dict[int, float] = defaultdict(float)
    contributors: dict[int, list[int]] = defaultdict(list)
    for index, task in enumerate(tasks):
        raw_phases = task.get("PreferredPhases")
        duration = coerce_number(task.get("Duration"))
        if is_blank(raw_phases) or duration is None:
            continue
        try:
            phases = parse_phases(raw_phases)
        except PhaseFormatError:
            issues.append(
                issue(index, "PreferredPhases", "Invalid phase format", Severity.ERROR)
            )
            continue
        for phase in phases:
            demand[phase] += duration
            contributors[phase].append(index)

    # (2) Aggregate capacity; malformed worker slots are reported by the schema checks
    capacity: dict[int, float] = defaultdict(float)
    for index, worker in enumerate(workers):
        raw_slots = worker.get("AvailableSlots")
        max_load = coerce_number(worker.get("MaxLoadPerPhase"))
        if is_blank(raw_slots) or max_load is None:
            continue
        try:
            slots = parse_phases(raw_slots)
        except PhaseFormatError as e:
            logger.debug("Worker row %d skipped in capacity accounting: %s", index, e.args[0])
            continue
        for slot in slots:
            capacity[slot] += max_load

    # (3) Flag contributors of every oversaturated phase
    for phase in sorted(demand):
        phase_demand = demand[phase]
        phase_capacity = capacity.get(phase, 0.0)
        if phase_demand <= phase_capacity:
            continue
        message = (
            f"Phase {phase} is oversaturated: "
            f"{_fmt(phase_demand)} demand vs {_fmt(phase_capacity)} capacity"
        )
        for index in contributors[phase]:
            issues.append(issue(index, "PreferredPhases", message, Severity.WARNING))

    return issues


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
