"""Config record export."""

import logging
from pathlib import Path
from typing import Sequence, Union

from formsmith._internal.canonical_json import document_dumps
from formsmith.kernel.synthesize import ConfigRecord

logger = logging.getLogger(__name__)


def dump_configs(records: Sequence[ConfigRecord]) -> str:
    """Serialize records as a JSON list; equal inputs give identical text."""
    return document_dumps([record.to_document() for record in records])


def write_configs(records: Sequence[ConfigRecord], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_configs(records), encoding="utf-8")
    logger.info("Wrote %d config records to %s", len(records), path)
    return path
