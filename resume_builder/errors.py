"""Domain exceptions raised by the storage and multi-resume layers."""

from __future__ import annotations


class ResumeBuilderError(Exception):
    """Base class for expected, user-facing failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ResumeBuilderError):
    """Data root is not configured or not usable."""


class InvalidYamlError(ResumeBuilderError):
    """Content failed YAML parsing."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid YAML: {detail}")
        self.detail = detail


class InvalidMetadataError(ResumeBuilderError):
    """Metadata update would produce an invalid record."""


class InvalidPathError(ResumeBuilderError):
    """Path is empty, absolute, or escapes the data root."""


class NoPendingChangesError(ResumeBuilderError):
    """Commit or discard requested while no temp file exists."""


class FileNotFoundInRootError(ResumeBuilderError):
    """Requested file does not exist under the data root."""


class ResumeNotFoundError(FileNotFoundInRootError):
    """No resume version matches the requested context."""


class FileAlreadyExistsError(ResumeBuilderError):
    """Target file exists and overwriting was not requested."""


class ResumeExistsError(FileAlreadyExistsError):
    """A resume version already exists at the target location."""
