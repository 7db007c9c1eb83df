"""formsmith: design-document field extraction and form config synthesis."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("formsmith")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from formsmith.api import extract, consolidate_inputs, generate_configs
from formsmith.contracts import ConsolidationResult, ExtractionResult
from formsmith.codes import DiagnosticCode
from formsmith.errors import (
    FormsmithError,
    DesignUrlError,
    DesignFetchError,
    NodeNotFoundError,
    UnsupportedFileFormatError,
)

__all__ = [
    "__version__",
    "extract",
    "consolidate_inputs",
    "generate_configs",
    "ConsolidationResult",
    "ExtractionResult",
    "DiagnosticCode",
    "FormsmithError",
    "DesignUrlError",
    "DesignFetchError",
    "NodeNotFoundError",
    "UnsupportedFileFormatError",
]
