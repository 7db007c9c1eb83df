"""Input-shape errors: fatal to the current operation, surfaced verbatim."""


class FormsmithError(ValueError):
    """Base class for formsmith input errors."""


class DesignUrlError(FormsmithError):
    """Raised when a design URL has no file key or no node-id."""


class NodeNotFoundError(FormsmithError):
    """Raised when the requested node is absent from a design document."""


class DesignFetchError(FormsmithError):
    """Raised when the design document cannot be retrieved."""


class UnsupportedFileFormatError(FormsmithError):
    """Raised for mapping, formula or row files with an unknown extension."""
