"""Design-node tree models.

A design document arrives as nested JSON exported by the design tool. These
models give it a small closed vocabulary of node types and make the tree
immutable once loaded, so every extraction pass sees the same structure.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Closed set of node kinds the extractor distinguishes."""

    TEXT = "TEXT"
    FRAME = "FRAME"
    INSTANCE = "INSTANCE"
    GROUP = "GROUP"
    OTHER = "OTHER"


# Raw design-tool type names -> NodeType
RAW_TYPE_MAP: Dict[str, NodeType] = {
    "TEXT": NodeType.TEXT,
    "FRAME": NodeType.FRAME,
    "COMPONENT_SET": NodeType.FRAME,
    "SECTION": NodeType.FRAME,
    "INSTANCE": NodeType.INSTANCE,
    "COMPONENT": NodeType.INSTANCE,
    "GROUP": NodeType.GROUP,
}


class BoundingBox(BaseModel):
    """Absolute position and size of a node on the canvas."""

    x: float
    y: float
    width: float = 0
    height: float = 0

    model_config = ConfigDict(frozen=True)


class DesignNode(BaseModel):
    """One node of a design document.

    `text` is only meaningful on TEXT nodes. Children are owned by their
    parent and kept in document order.
    """

    id: str = ""
    name: str = ""
    type: NodeType = NodeType.OTHER
    text: Optional[str] = None
    children: tuple["DesignNode", ...] = Field(default_factory=tuple)
    box: Optional[BoundingBox] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_text(self) -> bool:
        return self.type is NodeType.TEXT

    @property
    def is_frame(self) -> bool:
        return self.type is NodeType.FRAME

    @property
    def is_instance(self) -> bool:
        return self.type is NodeType.INSTANCE

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "DesignNode":
        """Build a node tree from the design tool's JSON.

        Accepts both the tool's own keys (`characters`, `absoluteBoundingBox`)
        and this model's keys (`text`, `box`), so serialized trees load back.
        """
        raw_type = str(data.get("type") or "").upper()
        node_type = RAW_TYPE_MAP.get(raw_type, NodeType.OTHER)

        text = data.get("characters")
        if text is None:
            text = data.get("text")

        raw_box = data.get("absoluteBoundingBox") or data.get("box")
        box = BoundingBox(**raw_box) if isinstance(raw_box, dict) and "x" in raw_box and "y" in raw_box else None

        children = tuple(cls.from_raw(child) for child in data.get("children") or [])

        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            type=node_type,
            text=text if isinstance(text, str) else None,
            children=children,
            box=box,
        )


DesignNode.model_rebuild()


def describe_tree(node: DesignNode, max_depth: int = 3) -> List[str]:
    """Render an indented outline of a tree, one line per node."""
    lines: List[str] = []

    def _describe(current: DesignNode, depth: int) -> None:
        if depth > max_depth:
            return
        line = f"{'  ' * depth}{current.type.value} \"{current.name}\""
        if current.text:
            snippet = current.text.strip().replace("\n", " ")
            if len(snippet) > 40:
                snippet = snippet[:37] + "..."
            line += f" text=\"{snippet}\""
        if current.children:
            line += f" ({len(current.children)} children)"
        lines.append(line)
        for child in current.children:
            _describe(child, depth + 1)

    _describe(node, 0)
    return lines
