"""docref - Cross-document reference resolution for static content-site builds."""

from docref.exceptions import (
    BuildAbortedError,
    ConfigurationError,
    ContentError,
    DocrefError,
    DuplicateIdentifierError,
    MissingIdentifierError,
    MissingReferenceError,
    MissingRepoPathError,
    PhaseOrderError,
    ResolutionError,
    SelfReferenceError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Base exception
    "DocrefError",
    # Configuration / content
    "ConfigurationError",
    "ContentError",
    "PhaseOrderError",
    # Resolution
    "ResolutionError",
    "MissingReferenceError",
    "DuplicateIdentifierError",
    "SelfReferenceError",
    "MissingRepoPathError",
    "MissingIdentifierError",
    "BuildAbortedError",
]
