"""
Service-layer exceptions for consistent error handling across the exporter.

ServiceError is the root of everything raised by the services. ExportError
and its subclasses describe the internal failure modes of the export
pipeline; ExportFailed is the single user-facing error that the export
entry points raise after logging the internal cause.
"""


class ServiceError(Exception):
    """Base exception for all service-related errors."""
    pass


class ServiceNotConfigured(ServiceError):
    """
    Raised when the export configuration is incomplete or invalid.
    
    Example:
        If DOCUMENT_EXPORT['PAGE_SIZE'] names an unknown paper format.
    """
    pass


class ExportError(ServiceError):
    """Base exception for failures inside the export pipeline."""
    pass


class DetachedNodeError(ExportError):
    """
    Raised when a document node is not mounted on a rendered surface.
    
    Only nodes that belong to a surface can be measured and captured.
    """
    pass


class EmptyContentError(ExportError):
    """Raised when the content to capture measures zero width or height."""
    pass


class CaptureError(ExportError):
    """
    Raised when rasterization fails.
    
    Example:
        The layout engine cannot load a font or the bitmap would exceed
        the configured pixel budget.
    """
    pass


class SerializationError(ExportError):
    """Raised when page images or the final document cannot be encoded."""
    pass


class MissingDataError(ExportError):
    """Raised when a tabular export is called without rows or columns."""
    pass


class ExportFailed(ExportError):
    """
    User-facing export failure.
    
    The message is short and safe to show to end users. The internal
    error is available as ``__cause__``.
    """
    
    def __init__(self, message: str, *, format: str = ''):
        super().__init__(message)
        self.format = format
