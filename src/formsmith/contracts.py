"""Public result models for formsmith package."""

from typing import List

from pydantic import BaseModel

from formsmith.kernel.consolidate import ConsolidatedRow, ValidationIssue
from formsmith.kernel.extract import ExtractionResult


class ConsolidationResult(BaseModel):
    """Rows built by one consolidation pass plus their diagnostics."""
    ok: bool  # True if no error-severity diagnostics
    rows: List[ConsolidatedRow]
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue]


__all__ = ["ConsolidationResult", "ExtractionResult"]
