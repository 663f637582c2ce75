from datarules.validator.validator import (
    DatasetValidator,
    validate_across_entities,
    validate_dataset,
    validate_entity_rows,
)

__all__ = [
    "DatasetValidator",
    "validate_across_entities",
    "validate_dataset",
    "validate_entity_rows",
]
