"""Consolidation: join extracted fields with DB mappings and formulas."""

import logging
from typing import Dict, Iterable, List, Literal, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, Field, field_validator

from formsmith.codes import DiagnosticCode
from .walker import ExtractedField

logger = logging.getLogger(__name__)

DEFAULT_PLAN_TYPE = "MEDICAL"


class DBMapping(BaseModel):
    """A field name -> DB column mapping record."""
    field_name: str
    db_column: str


class ComputedField(BaseModel):
    """A field name -> formula record for computed fields."""
    field_name: str
    formula: str


class ConsolidatedRow(BaseModel):
    """One field merged with its DB mapping and computed-formula status.

    Column order here is the column order of the tabular export.
    """
    section: str = ""
    subsection: str = ""
    field_name: str
    order: int = Field(0, ge=0)
    screen_name: str = "create"
    db_mapping: str = ""
    is_computed: Literal["YES", "NO"] = "NO"
    formula: str = ""
    plan_type: str = DEFAULT_PLAN_TYPE

    @field_validator("is_computed", mode="before")
    @classmethod
    def normalize_is_computed(cls, v):
        """Accept yes/no in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class ValidationIssue(BaseModel):
    """A consolidation diagnostic. `row` is the 1-based position in the row list."""
    row: int = Field(..., ge=1)
    field: str
    message: str
    severity: Literal["error", "warning"] = "error"
    code: DiagnosticCode


_Record = TypeVar("_Record", DBMapping, ComputedField)


def build_lookup(records: Iterable[_Record]) -> Dict[str, _Record]:
    """Index records by lower-cased field name. Later duplicates win."""
    lookup: Dict[str, _Record] = {}
    for record in records:
        key = record.field_name.lower()
        if key in lookup:
            logger.debug("Duplicate mapping key %r; keeping the later record", key)
        lookup[key] = record
    return lookup


def validate_rows(rows: Sequence[ConsolidatedRow]) -> List[ValidationIssue]:
    """Report missing DB mappings and computed rows without a formula."""
    issues: List[ValidationIssue] = []
    for index, row in enumerate(rows, start=1):
        if not row.db_mapping:
            issues.append(ValidationIssue(
                row=index,
                field=row.field_name,
                message="Missing DB mapping",
                code=DiagnosticCode.MISSING_DB_MAPPING,
            ))
        if row.is_computed == "YES" and not row.formula:
            issues.append(ValidationIssue(
                row=index,
                field=row.field_name,
                message="Computed field is missing formula",
                code=DiagnosticCode.MISSING_FORMULA,
            ))
    return issues


def consolidate(
    fields: Sequence[ExtractedField],
    db_mappings: Union[Iterable[DBMapping], Dict[str, DBMapping]],
    computed_fields: Union[Iterable[ComputedField], Dict[str, ComputedField], None] = None,
    plan_type: str = DEFAULT_PLAN_TYPE,
) -> Tuple[List[ConsolidatedRow], List[ValidationIssue]]:
    """Merge extracted fields with mapping and formula lookups.

    Lookups match on the lower-cased field name. Row order follows `fields`.
    Diagnostics never stop consolidation; every field yields a row.

    Returns:
        (rows, issues)
    """
    mapping_lookup = db_mappings if isinstance(db_mappings, dict) else build_lookup(db_mappings)
    if computed_fields is None:
        computed_lookup: Dict[str, ComputedField] = {}
    elif isinstance(computed_fields, dict):
        computed_lookup = computed_fields
    else:
        computed_lookup = build_lookup(computed_fields)

    rows: List[ConsolidatedRow] = []
    for field in fields:
        key = field.field_name.lower()
        mapping = mapping_lookup.get(key)
        computed = computed_lookup.get(key)
        rows.append(ConsolidatedRow(
            section=field.section,
            subsection=field.subsection,
            field_name=field.field_name,
            order=field.order,
            screen_name=field.screen_name,
            db_mapping=mapping.db_column if mapping else "",
            is_computed="YES" if computed else "NO",
            formula=computed.formula if computed else "",
            plan_type=plan_type,
        ))

    issues = validate_rows(rows)
    logger.debug("Consolidated %d rows with %d diagnostics", len(rows), len(issues))
    return rows, issues
