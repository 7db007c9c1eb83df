"""Design document sources: URL parsing, HTTP fetch, and local JSON files."""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs, urlparse

import requests

from formsmith.errors import DesignFetchError, DesignUrlError, NodeNotFoundError
from formsmith.kernel.nodes import DesignNode
from formsmith.settings import Settings

logger = logging.getLogger(__name__)

FILE_KEY_PATTERN = re.compile(r"/(?:file|design)/([^/]+)")


@dataclass(frozen=True)
class DesignLocator:
    """File key + node id identifying one node of a hosted design file."""
    file_key: str
    node_id: str


def normalize_node_id(node_id: str) -> str:
    """URLs carry node ids as 453-32363; the API expects 453:32363."""
    return node_id.strip().replace("-", ":")


def parse_design_url(url: str) -> DesignLocator:
    """Extract the file key and node id from a design URL.

    Accepts /file/<key>/... and /design/<key>/... paths with a node-id
    query parameter.
    """
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise DesignUrlError(f"Invalid design URL: {url!r}")

    match = FILE_KEY_PATTERN.search(parsed.path)
    if not match:
        raise DesignUrlError(f"Design URL has no /file/ or /design/ segment: {url!r}")

    node_ids = parse_qs(parsed.query).get("node-id")
    if not node_ids or not node_ids[0].strip():
        raise DesignUrlError(f"Design URL has no node-id parameter: {url!r}")

    return DesignLocator(file_key=match.group(1), node_id=normalize_node_id(node_ids[0]))


def is_design_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def select_node(data: Dict[str, Any], node_id: Optional[str] = None) -> Dict[str, Any]:
    """Pick the requested node document out of a nodes-endpoint response.

    A bare node document (no "nodes" key) is returned unchanged.
    """
    if "nodes" not in data:
        return data

    nodes = data.get("nodes") or {}
    if node_id is None:
        if len(nodes) != 1:
            raise NodeNotFoundError(
                f"Document holds {len(nodes)} nodes; a node id is required to pick one"
            )
        node_id = next(iter(nodes))
    else:
        node_id = normalize_node_id(node_id)

    entry = nodes.get(node_id)
    document = entry.get("document") if isinstance(entry, dict) else None
    if not document:
        raise NodeNotFoundError(f"Node {node_id} not found in design file")
    return document


def fetch_design_tree(
    locator: DesignLocator,
    token: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> DesignNode:
    """Fetch one node of a hosted design file. No retries."""
    settings = settings or Settings()
    token = token or settings.token
    url = f"{settings.api_base}/v1/files/{locator.file_key}/nodes"

    headers = {}
    if token:
        headers["X-Figma-Token"] = token
    else:
        logger.info("Fetching %s without an access token", url)

    try:
        response = requests.get(
            url,
            params={"ids": locator.node_id},
            headers=headers,
            timeout=settings.timeout_seconds,
        )
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        raise DesignFetchError(f"Failed to fetch design data: {e}") from e
    except ValueError as e:
        raise DesignFetchError(f"Design API returned invalid JSON: {e}") from e

    document = select_node(data, locator.node_id)
    node = DesignNode.from_raw(document)
    logger.info("Fetched node %s (%r) with %d children", node.id, node.name, len(node.children))
    return node


def load_design_tree(
    source: Union[str, Path, Dict[str, Any]],
    node_id: Optional[str] = None,
) -> DesignNode:
    """Load a design tree from a JSON file path or an already-parsed dict."""
    if isinstance(source, dict):
        data = source
    else:
        path = Path(source)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info("Loaded design document %s", path)
    return DesignNode.from_raw(select_node(data, node_id))
