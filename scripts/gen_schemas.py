# scripts/gen_schemas.py
"""
Generate JSON Schemas for the datarules wire formats.

This script exports JSON Schema files for:
    - Config (datarules.yaml)
    - ValidationIssue
    - Rule (discriminated union over the six rule variants)
    - RuleValidationResult

Output directory: schemas/
"""

import json
from pathlib import Path
from typing import Any

from datarules.schemas.models import Config, ValidationIssue
from datarules.schemas.rules import RULE_ADAPTER, RuleValidationResult


def export_schema(source: Any, name: str, out_dir: Path) -> Path:
    """
    @brief
    Exports the JSON schema of a pydantic model class or TypeAdapter.

    @details
    Schemas describe the serialized (camelCase) form, since that is what
    rule exports and reports contain.

    @params
        source : type[BaseModel] | TypeAdapter
            Model class or adapter whose schema will be generated.
        name : str
            Base name of the output file (without extension).
        out_dir : Path
            Target directory where the schema file will be written.

    @returns
        Path of the written "<name>.schema.json" file.

    @raises
        OSError
            If the schema file cannot be written.
    """
    # (1) Ensure output directory exists
    out_dir.mkdir(parents=True, exist_ok=True)

    # (2) Compute target path and generate schema data
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    if hasattr(source, "model_json_schema"):
        schema = source.model_json_schema(by_alias=True, mode="serialization")
    else:
        schema = source.json_schema(by_alias=True, mode="serialization")

    # (3) Serialize JSON Schema to file with indentation and final newline
    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")

    # (4) Print confirmation with relative path for user feedback
    try:
        rel = schema_path.relative_to(Path.cwd())
    except ValueError:
        rel = schema_path
    print(f"Generated {rel}")
    return schema_path


def main(out_dir: Path | None = None) -> list[Path]:
    """
    @brief
    Entry point for JSON Schema generation.

    @details
    All schema files are written into the `schemas/` directory at the
    repository root unless another directory is given.
    """
    # (1) Define output directory
    out_dir = (out_dir or Path("schemas")).resolve()

    # (2) Generate schemas for the public data contracts
    return [
        export_schema(Config, "config", out_dir),
        export_schema(ValidationIssue, "validation_issue", out_dir),
        export_schema(RULE_ADAPTER, "rule", out_dir),
        export_schema(RuleValidationResult, "rule_validation_result", out_dir),
    ]


if __name__ == "__main__":
    main()
