"""
Executor Module - Black Box Interface

Purpose: Turn kubectl operations into command lines and run them
Interface: CommandBuilder, ExecutionEngine, OutputSinks, error family
Hidden: Shell quoting, process spawning, stream relay threads, per-context status

Can be replaced with different execution mechanisms (direct K8s API, remote executors).
"""

from kubecli.modules.executor.commands import (
    ALL_NAMESPACES,
    CommandBuilder,
    Invocation,
    NamespaceScope,
    describe_namespace,
    format_selector,
    shell_quote,
)
from kubecli.modules.executor.engine import ExecutionEngine, ExecutionOutcome
from kubecli.modules.executor.errors import (
    AnnotateResourceError,
    DeleteResourceError,
    ErrorKind,
    GetResourceError,
    GetResourceParseError,
    GetVersionError,
    GetVersionParseError,
    InvalidResourceError,
    InvalidResourceUriError,
    KubernetesError,
    LastStatusUnavailableError,
    PatchResourceError,
)
from kubecli.modules.executor.sinks import OutputSinks

__all__ = [
    "ALL_NAMESPACES",
    "AnnotateResourceError",
    "CommandBuilder",
    "DeleteResourceError",
    "ErrorKind",
    "ExecutionEngine",
    "ExecutionOutcome",
    "GetResourceError",
    "GetResourceParseError",
    "GetVersionError",
    "GetVersionParseError",
    "InvalidResourceError",
    "InvalidResourceUriError",
    "Invocation",
    "KubernetesError",
    "LastStatusUnavailableError",
    "NamespaceScope",
    "OutputSinks",
    "PatchResourceError",
    "describe_namespace",
    "format_selector",
    "shell_quote",
]
