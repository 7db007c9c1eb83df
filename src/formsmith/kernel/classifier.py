"""Field-group classification, label extraction and spatial ordering."""

import re
from functools import cmp_to_key
from typing import Iterable, List, Optional, Sequence

from .nodes import DesignNode
from .rules import clean_field_name

GROUP_NAME_PATTERN = re.compile(r"field|input|dropdown|select|form-control", re.IGNORECASE)
INPUT_CHILD_PATTERN = re.compile(r"input|dropdown|select|textbox|field", re.IGNORECASE)
LABEL_CHILD_PATTERN = re.compile(r"label", re.IGNORECASE)
PLACEHOLDER_PATTERN = re.compile(r"^(select|enter|choose)", re.IGNORECASE)

ROW_TOLERANCE = 20  # canvas units; groups closer than this vertically share a row


def _is_label_child(node: DesignNode) -> bool:
    return node.is_text or bool(LABEL_CHILD_PATTERN.search(node.name))


def _is_input_child(node: DesignNode) -> bool:
    return node.is_instance or bool(INPUT_CHILD_PATTERN.search(node.name))


def is_field_container(node: DesignNode) -> bool:
    """Return True if `node` looks like one input field (label + input affordance).

    A node qualifies when it has children and either its own name uses the
    input vocabulary, or one child is a label and a different child is an
    input or a component instance.
    """
    if not node.children:
        return False

    if GROUP_NAME_PATTERN.search(node.name):
        return True

    label_indexes = {i for i, child in enumerate(node.children) if _is_label_child(child)}
    if not label_indexes:
        return False
    input_indexes = {i for i, child in enumerate(node.children) if _is_input_child(child)}
    return any(i != j for i in label_indexes for j in input_indexes)


def find_field_groups(nodes: Iterable[DesignNode]) -> List[DesignNode]:
    """Collect field groups below `nodes`, top-down.

    A container holding two or more nested groups is a wrapper around
    several fields: its nested groups are collected instead. Otherwise a
    container is one group and a single nested group is part of its input.
    """
    groups: List[DesignNode] = []
    for node in nodes:
        if is_field_container(node):
            nested = find_field_groups(node.children)
            if len(nested) >= 2:
                groups.extend(nested)
            else:
                groups.append(node)
        elif node.children:
            groups.extend(find_field_groups(node.children))
    return groups


def _first_label_text(nodes: Sequence[DesignNode]) -> Optional[str]:
    for child in nodes:
        if child.is_text and child.text:
            label = child.text.strip()
            if label and label != "*" and not PLACEHOLDER_PATTERN.match(label):
                return label
        if child.children:
            nested = _first_label_text(child.children)
            if nested:
                return nested
    return None


def extract_field_label(group: DesignNode) -> Optional[str]:
    """Return the visible label of a field group.

    Searches depth-first for the first text leaf that is not placeholder
    copy ("Select...", "Enter...", "Choose...") or a bare asterisk. Falls
    back to the group's cleaned name; returns None if that is blank too.
    """
    label = _first_label_text(group.children)
    if label:
        return label
    return clean_field_name(group.name) or None


def _compare_position(a: DesignNode, b: DesignNode) -> float:
    if a.box is None or b.box is None:
        return 0
    row_diff = a.box.y - b.box.y
    if abs(row_diff) > ROW_TOLERANCE:
        return row_diff
    return a.box.x - b.box.x


def sort_fields_by_position(groups: Sequence[DesignNode]) -> List[DesignNode]:
    """Order groups top-to-bottom by row, then left-to-right within a row.

    The sort is stable: groups without position data compare equal and keep
    their encountered order.
    """
    return sorted(groups, key=cmp_to_key(_compare_position))
