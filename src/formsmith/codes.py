"""Diagnostic code constants for consolidation results.

These constants prevent stringly-typed diagnostic codes and ensure
client code matches on the right values.
"""

from enum import Enum


class DiagnosticCode(str, Enum):
    """Consolidation diagnostic codes."""

    # Errors
    MISSING_DB_MAPPING = "MISSING_DB_MAPPING"
    MISSING_FORMULA = "MISSING_FORMULA"
