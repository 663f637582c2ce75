# src/datarules/dataloader/dataset_loader.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from datarules.errors import DataError
from datarules.schemas.models import Dataset, EntityCollection, EntityType

logger = logging.getLogger(__name__)


class DatasetLoader:
    """
    JSON -> Dataset.

    Input document:
      {"clients": [{...}, ...], "workers": [...], "tasks": [...]}

    Rules:
      - Each top-level key is optional; a missing key yields an empty collection.
      - Every row must be a JSON object; cell values are kept as read.
      - Unknown top-level keys are rejected.

    Fatal errors (raise DataError):
      - missing or unreadable file
      - invalid JSON
      - wrong document shape (root is not an object, entity is not a list,
        row is not an object)
    """

    def load(self, path: Path) -> Dataset:
        doc = self._read_json(path)
        dataset = self._to_dataset(doc, path)
        self._report_summary(path, dataset)
        return dataset

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_json(self, path: Path) -> Any:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="DatasetLoader._read_json",
                suggested_action="Pass a pathlib.Path pointing to the dataset JSON file.",
            )
        if not path.exists():
            raise DataError(
                message=f"Dataset file not found: {path}",
                source="DatasetLoader._read_json",
                suggested_action="Verify file path and ensure the dataset JSON is present.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Invalid dataset JSON: {e.msg} (line {e.lineno}, column {e.colno})",
                source="DatasetLoader._read_json",
                suggested_action="Fix the JSON syntax of the dataset file.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read dataset: {e}",
                source="DatasetLoader._read_json",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

    def _to_dataset(self, doc: Any, path: Path) -> Dataset:
        if not isinstance(doc, dict):
            raise DataError(
                message="Dataset root must be a JSON object.",
                source="DatasetLoader._to_dataset",
                suggested_action='Use {"clients": [...], "workers": [...], "tasks": [...]}.',
            )

        known = {e.value for e in EntityType}
        unknown = sorted(set(doc) - known)
        if unknown:
            raise DataError(
                message=f"Unknown entity key(s): {', '.join(unknown)}",
                source="DatasetLoader._to_dataset",
                suggested_action="Allowed keys: clients, workers, tasks.",
            )

        dataset = Dataset()
        for entity_type in EntityType:
            rows = doc.get(entity_type.value, [])
            if not isinstance(rows, list):
                raise DataError(
                    message=f"'{entity_type.value}' must be a list of row objects.",
                    source="DatasetLoader._to_dataset",
                    suggested_action="Wrap the rows of each entity in a JSON array.",
                )
            for idx, row in enumerate(rows):
                if not isinstance(row, dict):
                    raise DataError(
                        message=f"{entity_type.value}[{idx}] is not an object.",
                        source="DatasetLoader._to_dataset",
                        suggested_action="Each row must map column names to cell values.",
                    )
            collection = EntityCollection(
                entity_type=entity_type,
                rows=[dict(r) for r in rows],
                file_name=path.name,
            )
            setattr(dataset, entity_type.value, collection)
        return dataset

    def _report_summary(self, path: Path, dataset: Dataset) -> None:
        logger.info(
            "DatasetLoader OK: clients=%d workers=%d tasks=%d from %s",
            len(dataset.clients),
            len(dataset.workers),
            len(dataset.tasks),
            path,
        )
