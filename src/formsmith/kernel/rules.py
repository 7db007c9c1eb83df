"""Heuristic detection rules for screens, sections and subsections.

Each detector is an ordered table of independent predicate + extractor
pairs. Rules are evaluated top to bottom and the first rule whose predicate
holds and whose extractor yields a non-empty value wins.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .nodes import DesignNode

logger = logging.getLogger(__name__)


SCREEN_PATTERN = re.compile(r"(create|view|edit|delete)", re.IGNORECASE)

SECTION_NAME_PATTERN = re.compile(r"section", re.IGNORECASE)
SUBSECTION_NAME_PATTERN = re.compile(r"subsection|sub-section", re.IGNORECASE)
SECTION_REMAINDER_PATTERN = re.compile(r"section[:\s]*(.+)", re.IGNORECASE)
HEADING_TEXT_PATTERN = re.compile(r"^[A-Z\s]+$")
HEADING_MIN_LENGTH = 3  # headings must be strictly longer than this

SUBSECTION_TOKEN_PATTERN = re.compile(r"subsection|sub-section|special", re.IGNORECASE)
SUBSECTION_REMAINDER_PATTERN = re.compile(r"(?:subsection|sub-section|special)[:\s]*(.+)", re.IGNORECASE)
SUBSECTION_TEXT_PATTERN = re.compile(r"^(SPECIAL|IN NETWORK|OUT OF NETWORK|OTHER)", re.IGNORECASE)

FIELD_PREFIX_PATTERN = re.compile(r"^(field|input|label)[:\s]+", re.IGNORECASE)
NEWLINES_PATTERN = re.compile(r"[\n\r]+")
NON_ALNUM_PATTERN = re.compile(r"[^a-zA-Z0-9\s]")


@dataclass(frozen=True)
class DetectionRule:
    """A named predicate + extractor pair."""
    name: str
    applies: Callable[[DesignNode], bool]
    extract: Callable[[DesignNode], Optional[str]]


def to_camel_case(text: str) -> str:
    """Lower-case `text`, drop punctuation, and join words in camelCase."""
    words = NON_ALNUM_PATTERN.sub("", text.lower()).split()
    return "".join(word if index == 0 else word[:1].upper() + word[1:] for index, word in enumerate(words))


def clean_field_name(name: str) -> str:
    """Strip a leading field:/input:/label: token and collapse newlines."""
    return NEWLINES_PATTERN.sub(" ", FIELD_PREFIX_PATTERN.sub("", name)).strip()


def _text(node: DesignNode) -> str:
    return (node.text or "").strip() if node.is_text else ""


def _camel_remainder(pattern: re.Pattern) -> Callable[[DesignNode], Optional[str]]:
    def _extract(node: DesignNode) -> Optional[str]:
        match = pattern.search(node.name)
        if not match:
            return None
        return to_camel_case(match.group(1)) or None
    return _extract


def _is_heading_text(node: DesignNode) -> bool:
    text = _text(node)
    return (
        len(text) > HEADING_MIN_LENGTH
        and text == text.upper()
        and HEADING_TEXT_PATTERN.match(text) is not None
    )


def _screen_token(node: DesignNode) -> Optional[str]:
    match = SCREEN_PATTERN.search(node.name)
    return match.group(1).lower() if match else None


def _names_section(node: DesignNode) -> bool:
    return bool(SECTION_NAME_PATTERN.search(node.name)) and not SUBSECTION_NAME_PATTERN.search(node.name)


SCREEN_RULES: Sequence[DetectionRule] = (
    DetectionRule(
        name="screen_from_frame_name",
        applies=lambda node: node.is_frame,
        extract=_screen_token,
    ),
)

SECTION_RULES: Sequence[DetectionRule] = (
    DetectionRule(
        name="section_from_heading_text",
        applies=_is_heading_text,
        extract=lambda node: to_camel_case(_text(node)) or None,
    ),
    DetectionRule(
        name="section_from_node_name",
        applies=_names_section,
        extract=_camel_remainder(SECTION_REMAINDER_PATTERN),
    ),
)

SUBSECTION_RULES: Sequence[DetectionRule] = (
    DetectionRule(
        name="subsection_from_node_name",
        applies=lambda node: bool(SUBSECTION_TOKEN_PATTERN.search(node.name)),
        extract=_camel_remainder(SUBSECTION_REMAINDER_PATTERN),
    ),
    DetectionRule(
        name="subsection_from_label_text",
        applies=lambda node: bool(SUBSECTION_TEXT_PATTERN.match(_text(node))),
        extract=lambda node: to_camel_case(_text(node)) or None,
    ),
)


def first_match(rules: Sequence[DetectionRule], node: DesignNode) -> Optional[str]:
    """Evaluate `rules` in order and return the first extracted value."""
    for rule in rules:
        if not rule.applies(node):
            continue
        value = rule.extract(node)
        if value:
            logger.debug("%s matched node %s (%r): %s", rule.name, node.id, node.name, value)
            return value
    return None


def detect_screen(node: DesignNode) -> Optional[str]:
    return first_match(SCREEN_RULES, node)


def detect_section(node: DesignNode) -> Optional[str]:
    return first_match(SECTION_RULES, node)


def detect_subsection(node: DesignNode) -> Optional[str]:
    return first_match(SUBSECTION_RULES, node)
