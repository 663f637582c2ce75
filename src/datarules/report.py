# src/datarules/report.py
from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import Field

from datarules.errors import DataError
from datarules.schemas.models import Severity, ValidationIssue, _StrictBaseModel

logger = logging.getLogger(__name__)


class ValidationSummary(_StrictBaseModel):
    """
    @brief
    Aggregate view of one collection's validation issues.

    @details
    `health_score` is the share of rows without any issue, in percent,
    rounded half up to an integer; an empty collection scores 100.
    """

    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    affected_rows: int = 0
    clean_rows: int = 0
    total_rows: int = 0
    health_score: int = Field(100, ge=0, le=100)


def summarize_issues(issues: Iterable[ValidationIssue], total_rows: int) -> ValidationSummary:
    issues = list(issues)
    errors = sum(1 for i in issues if i.severity == Severity.ERROR)
    affected = len({i.row_index for i in issues})
    clean = max(total_rows - affected, 0)
    score = math.floor(clean / total_rows * 100 + 0.5) if total_rows > 0 else 100
    return ValidationSummary(
        total_issues=len(issues),
        error_count=errors,
        warning_count=len(issues) - errors,
        affected_rows=affected,
        clean_rows=clean,
        total_rows=total_rows,
        health_score=score,
    )


def has_blocking_errors(issues: Iterable[ValidationIssue]) -> bool:
    """Any error-severity issue blocks a clean export."""
    return any(i.severity == Severity.ERROR for i in issues)


def save_report(
    report: dict[str, Any],
    out_dir: Path | None = None,
    filename: str = "validation_report.json",
) -> Path:
    """
    @brief
    Write a validation report atomically in UTF-8 encoding.

    @details
    Serializes first, so a non-serializable report never leaves a partial
    file behind, then writes to a temporary file next to the target and
    swaps it into place.

    @params
        report : dict[str, Any]
            Report dictionary (see DatasetValidator.build_report).
        out_dir : Path | None
            Target directory (defaults to 'data/output').
        filename : str
            Target filename.

    @returns
        Path to the written JSON file.

    @raises
        DataError
            If the report is not JSON-serializable or the write fails.
    """
    # (1) Validate serializability
    try:
        payload = json.dumps(report, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise DataError(
            f"report not JSON-serializable: {e}",
            source="report.save_report",
            suggested_action="Dump pydantic models with model_dump(mode='json') before saving.",
        ) from e

    # (2) Ensure output directory exists
    target_dir = Path(out_dir) if out_dir is not None else Path("data/output")
    target_dir.mkdir(parents=True, exist_ok=True)
    final_path = target_dir / filename

    # (3) Temp file + atomic replace
    fd, tmp_path = tempfile.mkstemp(prefix=final_path.name + ".", dir=str(target_dir))
    try:
        with open(fd, "w", encoding="utf-8", newline="") as f:
            f.write(payload)
        os.replace(tmp_path, final_path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise DataError(
            f"Failed to write validation report: {e}",
            source="report.save_report",
            suggested_action="Check disk permissions and free space.",
        ) from e

    logger.info("Validation report saved: %s", final_path)
    return final_path


__all__ = ["ValidationSummary", "has_blocking_errors", "save_report", "summarize_issues"]
