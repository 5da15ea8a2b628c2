"""
Error family raised by kubectl operations.

Every error carries a ``kind`` so callers can tell an exit-status failure
from a decode failure of the same operation without parsing messages.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Failure classes surfaced by the client."""

    GENERIC = "generic"
    NO_STATUS = "no_status"
    INVALID_RESOURCE = "invalid_resource"
    INVALID_RESOURCE_URI = "invalid_resource_uri"
    GET_RESOURCE = "get_resource"
    GET_RESOURCE_PARSE = "get_resource_parse"
    DELETE_RESOURCE = "delete_resource"
    PATCH_RESOURCE = "patch_resource"
    ANNOTATE_RESOURCE = "annotate_resource"
    GET_VERSION = "get_version"
    GET_VERSION_PARSE = "get_version_parse"


class KubernetesError(Exception):
    """Base class for all kubectl operation failures."""

    kind = ErrorKind.GENERIC

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class LastStatusUnavailableError(KubernetesError):
    """Raised when the last status is read before any invocation in this context."""

    kind = ErrorKind.NO_STATUS


class InvalidResourceError(KubernetesError):
    kind = ErrorKind.INVALID_RESOURCE

    def __init__(self, message: str, exit_code: Optional[int] = None, resource: Any = None):
        super().__init__(message, exit_code)
        self.resource = resource


class InvalidResourceUriError(KubernetesError):
    kind = ErrorKind.INVALID_RESOURCE_URI

    def __init__(
        self, message: str, exit_code: Optional[int] = None, resource_uri: Optional[str] = None
    ):
        super().__init__(message, exit_code)
        self.resource_uri = resource_uri


class GetResourceError(KubernetesError):
    kind = ErrorKind.GET_RESOURCE


class GetResourceParseError(GetResourceError):
    """kubectl exited cleanly but its output was not the expected JSON."""

    kind = ErrorKind.GET_RESOURCE_PARSE


class DeleteResourceError(KubernetesError):
    kind = ErrorKind.DELETE_RESOURCE


class PatchResourceError(KubernetesError):
    kind = ErrorKind.PATCH_RESOURCE


class AnnotateResourceError(KubernetesError):
    kind = ErrorKind.ANNOTATE_RESOURCE


class GetVersionError(KubernetesError):
    kind = ErrorKind.GET_VERSION


class GetVersionParseError(GetVersionError):
    kind = ErrorKind.GET_VERSION_PARSE


__all__ = [
    "AnnotateResourceError",
    "DeleteResourceError",
    "ErrorKind",
    "GetResourceError",
    "GetResourceParseError",
    "GetVersionError",
    "GetVersionParseError",
    "InvalidResourceError",
    "InvalidResourceUriError",
    "KubernetesError",
    "LastStatusUnavailableError",
    "PatchResourceError",
]
