"""Custom exception hierarchy for Forever Paws."""

from __future__ import annotations


class ForeverPawsError(Exception):
    """Base class for all custom errors raised by Forever Paws."""


# --- 3-layer hierarchy ---

class DomainError(ForeverPawsError):
    """Base class for domain-level errors."""


class InfrastructureError(ForeverPawsError):
    """Base class for infrastructure-level errors."""


class ApplicationError(ForeverPawsError):
    """Base class for application-level errors."""


# --- Domain errors ---

class PhotoNotFoundError(DomainError):
    """Raised when the requested pet photo cannot be located."""


class InvalidCropDataError(DomainError):
    """Raised when stored crop metadata cannot be interpreted."""


# --- Infrastructure errors ---

class DatabaseError(InfrastructureError):
    """Raised when a database operation fails."""


class ConnectionPoolExhausted(InfrastructureError):
    """Raised when no connections are available in the pool."""


class ImageLoadError(InfrastructureError):
    """Raised when a source image cannot be read or decoded."""


class ManifestInvalidError(InfrastructureError):
    """Raised when a JSON document is missing or malformed."""


# --- Application errors ---

class PhotoImportError(ApplicationError):
    """Raised when an image cannot be added to the pet photo library."""


class ExportError(ApplicationError):
    """Raised when a cropped image cannot be written."""


# --- DI-specific errors ---

class CircularDependencyError(ForeverPawsError):
    """Raised when a circular dependency is detected during resolution."""


class ResolutionError(ForeverPawsError):
    """Raised when a dependency cannot be resolved."""


# --- Settings ---

class SettingsError(ForeverPawsError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
