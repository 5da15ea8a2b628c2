"""
kubecli - a thin client that drives kubectl.

Translates method calls into kubectl command lines, runs them, and
surfaces typed errors.
"""

from kubecli.cli import KubernetesCLI
from kubecli.modules.executor import (
    ALL_NAMESPACES,
    AnnotateResourceError,
    DeleteResourceError,
    ErrorKind,
    ExecutionOutcome,
    GetResourceError,
    GetResourceParseError,
    GetVersionError,
    GetVersionParseError,
    InvalidResourceError,
    InvalidResourceUriError,
    Invocation,
    KubernetesError,
    LastStatusUnavailableError,
    PatchResourceError,
)
from kubecli.modules.resource import KubernetesResource

__version__ = "0.1.0"

__all__ = [
    "ALL_NAMESPACES",
    "AnnotateResourceError",
    "DeleteResourceError",
    "ErrorKind",
    "ExecutionOutcome",
    "GetResourceError",
    "GetResourceParseError",
    "GetVersionError",
    "GetVersionParseError",
    "InvalidResourceError",
    "InvalidResourceUriError",
    "Invocation",
    "KubernetesCLI",
    "KubernetesError",
    "KubernetesResource",
    "LastStatusUnavailableError",
    "PatchResourceError",
]
