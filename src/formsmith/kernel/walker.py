"""Primary design-tree walk: context tracking and field emission."""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .classifier import extract_field_label, find_field_groups, sort_fields_by_position
from .nodes import DesignNode
from .rules import detect_screen, detect_section, detect_subsection

logger = logging.getLogger(__name__)

DEFAULT_SCREEN = "create"


@dataclass(frozen=True)
class ExtractionContext:
    """Section/subsection/screen in effect for a subtree.

    Frozen: a child refines its own copy via `refine()` and never changes
    what its parent or siblings see.
    """
    section: Optional[str] = None
    subsection: Optional[str] = None
    screen_name: Optional[str] = None

    def refine(self, **changes) -> "ExtractionContext":
        return replace(self, **changes)

    def key(self) -> Tuple[str, str, str]:
        return (self.section or "", self.subsection or "", self.screen_name or DEFAULT_SCREEN)


class ExtractedField(BaseModel):
    """One detected input field."""
    section: str
    subsection: str = ""
    field_name: str
    order: int = Field(..., ge=1)  # unique within its sibling batch only
    screen_name: str = DEFAULT_SCREEN

    model_config = ConfigDict(frozen=True)


def refine_context(node: DesignNode, context: ExtractionContext) -> ExtractionContext:
    """Apply screen, section and subsection detection for `node`."""
    if context.screen_name is None and node.is_frame:
        screen = detect_screen(node)
        if screen:
            context = context.refine(screen_name=screen)

    section = detect_section(node)
    if section:
        # A new section always invalidates the previous subsection
        context = context.refine(section=section, subsection=None)

    subsection = detect_subsection(node)
    if subsection and context.section:
        context = context.refine(subsection=subsection)

    return context


def walk_design_tree(
    root: DesignNode,
    context: Optional[ExtractionContext] = None,
) -> List[ExtractedField]:
    """Extract fields from `root` in tree pre-order.

    Every node with a section in effect searches its descendants for field
    groups and emits them as one ordered batch. A group reached again from a
    deeper node is re-emitted only if the deeper context differs (for
    example a subsection was detected in between); the re-emission replaces
    the earlier one in place, so each group yields exactly one field.

    An emitted group owns its subtree: nothing below it is searched.
    """
    emitted: Dict[int, Tuple[Tuple[str, str, str], ExtractedField]] = {}
    _visit(root, context or ExtractionContext(), emitted)
    fields = [field for _, field in emitted.values()]
    logger.debug("Primary walk emitted %d fields", len(fields))
    return fields


def _visit(
    node: DesignNode,
    context: ExtractionContext,
    emitted: Dict[int, Tuple[Tuple[str, str, str], ExtractedField]],
) -> None:
    if id(node) in emitted:
        return

    context = refine_context(node, context)

    if node.children and context.section:
        labeled = []
        for group in sort_fields_by_position(find_field_groups(node.children)):
            label = extract_field_label(group)
            if label:
                labeled.append((group, label))
        if labeled:
            logger.debug(
                "Node %s (%r): %d field groups in section %s",
                node.id, node.name, len(labeled), context.section,
            )
        context_key = context.key()
        section, subsection, screen_name = context_key
        for order, (group, label) in enumerate(labeled, start=1):
            previous = emitted.get(id(group))
            if previous is not None and previous[0] == context_key:
                continue
            emitted[id(group)] = (
                context_key,
                ExtractedField(
                    section=section,
                    subsection=subsection,
                    field_name=label,
                    order=order,
                    screen_name=screen_name,
                ),
            )

    for child in node.children:
        _visit(child, context, emitted)
