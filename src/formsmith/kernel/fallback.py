"""Degraded-mode extraction used when the primary walk finds nothing."""

import logging
import re
from typing import Iterator, List

from .nodes import DesignNode
from .rules import clean_field_name
from .walker import DEFAULT_SCREEN, ExtractedField

logger = logging.getLogger(__name__)

FALLBACK_PATTERNS = (
    re.compile(r"^(field|input)[:\s]", re.IGNORECASE),
    re.compile(r"label$", re.IGNORECASE),
    re.compile(r"name|number|date|amount|deductible|premium|coverage", re.IGNORECASE),
)


def _iter_preorder(node: DesignNode) -> Iterator[DesignNode]:
    yield node
    for child in node.children:
        yield from _iter_preorder(child)


def is_fallback_candidate(node: DesignNode) -> bool:
    """True for a text leaf whose name or content looks like a field label."""
    if not node.is_text:
        return False
    haystacks = [node.name, (node.text or "").strip()]
    return any(pattern.search(value) for pattern in FALLBACK_PATTERNS for value in haystacks if value)


def fallback_extract(root: DesignNode) -> List[ExtractedField]:
    """Treat every candidate text leaf as a field, ignoring sections.

    Order is sequential in traversal order across the whole tree.
    """
    fields: List[ExtractedField] = []
    for node in _iter_preorder(root):
        if not is_fallback_candidate(node):
            continue
        label = clean_field_name(node.text or "") or clean_field_name(node.name)
        if not label:
            continue
        fields.append(ExtractedField(
            section="",
            subsection="",
            field_name=label,
            order=len(fields) + 1,
            screen_name=DEFAULT_SCREEN,
        ))
    logger.debug("Fallback pass found %d candidate fields", len(fields))
    return fields
