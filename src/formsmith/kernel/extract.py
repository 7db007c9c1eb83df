"""Field extraction entry point: primary walk with fallback."""

import logging
from typing import List, Literal

from pydantic import BaseModel, Field

from .fallback import fallback_extract
from .nodes import DesignNode
from .walker import ExtractedField, walk_design_tree

logger = logging.getLogger(__name__)


class ExtractionResult(BaseModel):
    """Fields extracted from one design tree and how they were found."""
    strategy: Literal["primary", "fallback", "empty"]
    fields: List[ExtractedField] = Field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.strategy == "fallback"


def extract_fields(root: DesignNode) -> ExtractionResult:
    """Run the primary walk; fall back to the loose pass only if it finds nothing.

    An empty result is reported with strategy "empty", never raised.
    """
    fields = walk_design_tree(root)
    if fields:
        return ExtractionResult(strategy="primary", fields=fields)

    logger.warning("No fields found under node %s (%r); trying fallback extraction", root.id, root.name)
    fields = fallback_extract(root)
    if fields:
        logger.warning("Fallback extraction recovered %d fields (sections not detected)", len(fields))
        return ExtractionResult(strategy="fallback", fields=fields)

    logger.warning("No fields found even after fallback extraction")
    return ExtractionResult(strategy="empty", fields=[])
