# src/datarules/errors.py
from __future__ import annotations

from datetime import datetime, timezone


class DatarulesError(Exception):
    """Base class for all structured datarules exceptions."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.args[0]}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class ConfigError(DatarulesError):
    """Invalid or missing configuration (datarules.yaml)"""


class DataError(DatarulesError):
    """Unreadable dataset file or report I/O failure"""


class RuleError(DatarulesError):
    """Malformed rule payload or illegal rule update"""


class RuleTypeError(RuleError):
    """Rule carries a type tag no validator knows (programming defect)"""


class PhaseFormatError(DatarulesError):
    """Phase list is not a JSON array, a hyphen range or a single number"""
