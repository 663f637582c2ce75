# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from datarules.dataloader.config_loader import ConfigLoader
from datarules.dataloader.dataset_loader import DatasetLoader
from datarules.errors import DataError, DatarulesError
from datarules.report import save_report
from datarules.rules.conflicts import validate_rule_conflicts
from datarules.rules.data_refs import build_data_context, validate_rule_against_data
from datarules.rules.export import import_rules
from datarules.rules.rule_validator import validate_rule
from datarules.schemas.models import Config
from datarules.schemas.rules import RulesImport
from datarules.validator.validator import DatasetValidator


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args() -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for the validation pipeline.

    @details
    - config path (YAML, optional: defaults apply when omitted),
    - dataset JSON path,
    - rules export JSON path (optional),
    - output directory for the report (overrides config.output_dir).
    """
    parser = argparse.ArgumentParser(
        prog="datarules-run",
        description="Validate a clients/workers/tasks dataset and its business rules",
    )

    # (1) Config path argument
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config YAML (default: built-in defaults)",
    )

    # (2) Dataset path argument
    parser.add_argument(
        "--data",
        type=str,
        required=True,
        help='Path to dataset JSON {"clients": [...], "workers": [...], "tasks": [...]}',
    )

    # (3) Rules path argument
    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="Path to a rules export JSON (optional)",
    )

    # (4) Output directory argument
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for validation_report.json (default: config output_dir)",
    )

    return parser.parse_args()


def _load_rules(rules_path: Path | None) -> RulesImport:
    if rules_path is None:
        return RulesImport()
    if not rules_path.exists():
        raise DataError(
            message=f"Rules file not found: {rules_path}",
            source="scripts.run",
            suggested_action="Pass a file produced by the rules export or omit --rules.",
        )
    try:
        text = rules_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DataError(
            message=f"Unable to read rules file: {e}",
            source="scripts.run",
            suggested_action="Check file permissions.",
        ) from e
    return import_rules(text)


def _validate_rules(rules: list[Any], dataset: Any) -> dict[str, Any]:
    """
    @brief
    Run per-rule, set-level and rule-vs-data validation.

    @returns
        Dictionary with per-rule results (keyed by rule id), the conflict
        result for the whole set, and error/warning totals.
    """
    context = build_data_context(dataset.clients.rows, dataset.workers.rows, dataset.tasks.rows)

    per_rule: dict[str, Any] = {}
    errors = warnings = 0
    for rule in rules:
        own = validate_rule(rule)
        against_data = validate_rule_against_data(rule, context)
        per_rule[rule.id] = {
            "name": rule.name,
            "type": rule.type,
            "rule": own.model_dump(mode="json", by_alias=True),
            "data": against_data.model_dump(mode="json", by_alias=True),
        }
        errors += len(own.errors) + len(against_data.errors)
        warnings += len(own.warnings) + len(against_data.warnings)

    conflicts = validate_rule_conflicts(rules)
    errors += len(conflicts.errors)
    warnings += len(conflicts.warnings)

    return {
        "per_rule": per_rule,
        "conflicts": conflicts.model_dump(mode="json", by_alias=True),
        "error_count": errors,
        "warning_count": warnings,
    }


def run_pipeline(
    config_path: Path | None,
    data_path: Path,
    rules_path: Path | None = None,
    output_dir: Path | None = None,
) -> dict[str, Any]:
    """
    @brief
    Executes the full validation pipeline.

    @details
    Performs sequential steps:
    (1) Load configuration, dataset and rules.
    (2) Validate the dataset (schema and cross-entity checks).
    (3) Validate every rule, the rule set, and rules against the data.
    (4) Persist the combined report and return it with a verdict.

    @returns
        Dictionary with `valid`, `blocking` (exit policy verdict), the full
        `report`, and the report path (None when writing is disabled).

    @raises
        DatarulesError
            On configuration, dataset or rules file issues.
    """
    t0 = time.perf_counter()

    # (1) Load inputs
    cfg = ConfigLoader().load(config_path) if config_path is not None else Config()
    out_dir = output_dir if output_dir is not None else Path(cfg.output_dir)

    logging.info("Loading dataset: %s", data_path)
    dataset = DatasetLoader().load(data_path)

    imported = _load_rules(rules_path)
    rules = imported.rules
    logging.info("Loaded %d rule(s)", len(rules))

    # (2) Dataset validation
    validator = DatasetValidator(dataset, cfg)
    validator.run_all_checks()
    report = validator.build_report()

    # (3) Rule validation
    rules_section = _validate_rules(rules, dataset)
    rules_section["priority_weights"] = [
        w.model_dump(mode="json", by_alias=True) for w in imported.priority_weights
    ]
    report["rules"] = rules_section
    report["valid"] = bool(report["valid"]) and rules_section["error_count"] == 0

    # (4) Exit policy
    data_warnings = sum(e["summary"]["warningCount"] for e in report["entities"].values())
    has_warnings = data_warnings + rules_section["warning_count"] > 0
    blocking = not report["valid"] or (cfg.report.fail_on_warnings and has_warnings)

    report_path: Path | None = None
    if cfg.report.write_report:
        report_path = save_report(report, out_dir=out_dir, filename=cfg.report.filename)

    logging.info(
        "Validation finished in %.2f s: valid=%s, rule errors=%d, rule warnings=%d",
        time.perf_counter() - t0,
        report["valid"],
        rules_section["error_count"],
        rules_section["warning_count"],
    )
    return {"valid": report["valid"], "blocking": blocking, "report": report, "path": report_path}


def main() -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – no blocking findings
      1 – blocking findings or controlled failure (config/data/rules)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args()

    try:
        result = run_pipeline(
            Path(args.config) if args.config else None,
            Path(args.data),
            Path(args.rules) if args.rules else None,
            Path(args.output) if args.output else None,
        )
        if result["path"] is not None:
            logging.info("Report written to %s", result["path"].as_posix())
        return 1 if result["blocking"] else 0

    except DatarulesError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
