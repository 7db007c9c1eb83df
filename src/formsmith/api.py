"""Public API for formsmith.

High-level functions that accept paths or already-loaded data and return
complete, structured results. The CLI is a thin layer over these.
"""

import os
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from formsmith.contracts import ConsolidationResult
from formsmith.kernel.consolidate import (
    ComputedField,
    ConsolidatedRow,
    DBMapping,
    consolidate,
)
from formsmith.kernel.extract import ExtractionResult, extract_fields
from formsmith.kernel.nodes import DesignNode
from formsmith.kernel.synthesize import ConfigRecord, synthesize_all
from formsmith.kernel.walker import ExtractedField
from formsmith.settings import Settings
from formsmith._internal.io.design_source import (
    fetch_design_tree,
    is_design_url,
    load_design_tree,
    normalize_node_id,
    parse_design_url,
)
from formsmith._internal.io.mapping_files import read_computed_fields, read_db_mappings
from formsmith._internal.io.workbook import read_consolidated_workbook

PathLike = Union[str, os.PathLike, Path]
DesignSource = Union[PathLike, Dict[str, Any], DesignNode]


def load_design(
    source: DesignSource,
    *,
    node_id: Optional[str] = None,
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> DesignNode:
    """Resolve a design source (URL, JSON path, dict or node) to a node tree.

    For URLs, an explicit `node_id` overrides the one in the query string.
    """
    if isinstance(source, DesignNode):
        return source
    if isinstance(source, dict):
        return load_design_tree(source, node_id)
    if isinstance(source, str) and is_design_url(source):
        locator = parse_design_url(source)
        if node_id:
            locator = replace(locator, node_id=normalize_node_id(node_id))
        return fetch_design_tree(locator, token=token, settings=settings)
    return load_design_tree(Path(source), node_id)


def extract(
    source: DesignSource,
    *,
    node_id: Optional[str] = None,
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ExtractionResult:
    """Extract ordered field descriptors from a design source."""
    root = load_design(source, node_id=node_id, token=token, settings=settings)
    return extract_fields(root)


def _load_mappings(mappings: Union[PathLike, Sequence[DBMapping]]) -> List[DBMapping]:
    if isinstance(mappings, (str, os.PathLike)):
        return read_db_mappings(mappings)
    return list(mappings)


def _load_computed(computed: Union[PathLike, Sequence[ComputedField], None]) -> List[ComputedField]:
    if computed is None:
        return []
    if isinstance(computed, (str, os.PathLike)):
        return read_computed_fields(computed)
    return list(computed)


def consolidate_inputs(
    fields: Union[ExtractionResult, Sequence[ExtractedField]],
    db_mappings: Union[PathLike, Sequence[DBMapping]],
    computed_fields: Union[PathLike, Sequence[ComputedField], None] = None,
    plan_type: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ConsolidationResult:
    """Merge fields with mapping and formula inputs.

    Mapping inputs may be file paths (any supported format) or parsed lists.
    Diagnostics are returned, never raised.
    """
    if isinstance(fields, ExtractionResult):
        fields = fields.fields
    settings = settings or Settings()

    rows, issues = consolidate(
        fields,
        _load_mappings(db_mappings),
        _load_computed(computed_fields),
        plan_type=plan_type or settings.plan_type,
    )
    errors = [issue for issue in issues if issue.severity == "error"]
    warnings = [issue for issue in issues if issue.severity == "warning"]
    return ConsolidationResult(ok=not errors, rows=rows, errors=errors, warnings=warnings)


def generate_configs(rows: Union[PathLike, Sequence[ConsolidatedRow]]) -> List[ConfigRecord]:
    """Synthesize config records from a consolidated row file or row list."""
    if isinstance(rows, (str, os.PathLike)):
        rows = read_consolidated_workbook(rows)
    return synthesize_all(rows)
