"""
Command builder for kubectl invocations.

Every public operation turns its typed parameters into an ``Invocation``:
an immutable, ordered tuple of argument tokens plus environment overrides.
Tokens are joined with spaces and handed to a shell, so any value that has
to survive the shell round-trip (patch JSON, annotation values) is quoted
here and nowhere else.
"""

import shlex
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple, Union


class NamespaceScope(Enum):
    """Out-of-band namespace markers."""

    ALL = "all"


# Selects --all-namespaces. Distinct from the literal string "all".
ALL_NAMESPACES = NamespaceScope.ALL

NamespaceArg = Union[str, NamespaceScope, None]
CommandArg = Union[str, Sequence[str]]


@dataclass(frozen=True)
class Invocation:
    """One fully assembled kubectl command line."""

    argv: Tuple[str, ...]
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "argv", tuple(self.argv))
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)

    def includes(self, *args: str) -> bool:
        """True if ``args`` appear as a contiguous run of tokens."""
        size = len(args)
        return any(
            self.argv[i : i + size] == args for i in range(len(self.argv) - size + 1)
        )

    def __str__(self) -> str:
        return self.command_line


def shell_quote(value: str) -> str:
    """Single-quote a value for the shell, escaping embedded quotes."""
    return "'" + value.replace("'", "'\"'\"'") + "'"


def format_selector(labels: Mapping[str, str]) -> str:
    """Serialize labels as ``k1=v1,k2=v2`` in mapping iteration order."""
    return ",".join(f"{key}={value}" for key, value in labels.items())


def describe_namespace(namespace: NamespaceArg) -> str:
    if namespace is ALL_NAMESPACES:
        return "all namespaces"
    if not namespace:
        return "the current namespace"
    return f"namespace {namespace}"


def _as_tokens(cmd: CommandArg) -> List[str]:
    if isinstance(cmd, str):
        return [cmd]
    return list(cmd)


class CommandBuilder:
    """Builds argv for each kubectl operation."""

    def __init__(self, executable: str, kubeconfig_path: str):
        self.executable = executable
        self.kubeconfig_path = kubeconfig_path

    @property
    def base_cmd(self) -> List[str]:
        return [self.executable, "--kubeconfig", self.kubeconfig_path]

    @staticmethod
    def namespace_flags(namespace: NamespaceArg, allow_all: bool = False) -> List[str]:
        """
        Translate a namespace argument into flags.

        Args:
            namespace: Concrete namespace, ``ALL_NAMESPACES`` or a falsy value
            allow_all: Whether the all-namespaces marker is meaningful here

        Returns:
            ``["--all-namespaces"]``, ``["-n", namespace]`` or ``[]``

        Raises:
            ValueError: If the marker is given where it is not allowed
        """
        if namespace is ALL_NAMESPACES:
            if not allow_all:
                raise ValueError("ALL_NAMESPACES is only valid for multi-object operations")
            return ["--all-namespaces"]
        if not namespace:
            return []
        if not isinstance(namespace, str):
            raise ValueError(f"Invalid namespace: {namespace!r}")
        return ["-n", namespace]

    def _build(self, args: List[str], env: Optional[Mapping[str, str]]) -> Invocation:
        return Invocation(argv=tuple(self.base_cmd + args), env=env or {})

    def version(self, env: Optional[Mapping[str, str]] = None) -> Invocation:
        return self._build(["version", "-o", "json"], env)

    def raw(self, cmd: CommandArg, env: Optional[Mapping[str, str]] = None) -> Invocation:
        return self._build(_as_tokens(cmd), env)

    def exec(
        self,
        container_cmd: CommandArg,
        namespace: str,
        pod: str,
        tty: bool = True,
        container: Optional[str] = None,
        out_file: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace) + ["exec"]
        if tty:
            args.append("-it")
        if container:
            args += ["-c", container]
        args += [pod, "--", *_as_tokens(container_cmd)]
        if out_file:
            args += [">", out_file]
        return self._build(args, env)

    def apply(
        self,
        source: str = "-",
        dry_run: bool = False,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = ["apply", "--validate"]
        if dry_run:
            args.append("--dry-run=client")
        args += ["-f", source]
        return self._build(args, env)

    def get(
        self,
        type_: str,
        namespace: NamespaceArg,
        name: str,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace)
        args += ["get", type_, name, "-o", "json"]
        return self._build(args, env)

    def get_many(
        self,
        type_: str,
        namespace: NamespaceArg,
        match_labels: Optional[Mapping[str, str]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace, allow_all=True)
        args += ["get", type_]
        if match_labels:
            args += ["--selector", format_selector(match_labels)]
        args += ["-o", "json"]
        return self._build(args, env)

    def delete(
        self,
        type_: str,
        namespace: NamespaceArg,
        name: str,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace) + ["delete", type_, name]
        return self._build(args, env)

    def delete_many(
        self,
        type_: str,
        namespace: NamespaceArg,
        match_labels: Optional[Mapping[str, str]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace, allow_all=True) + ["delete", type_]
        if match_labels:
            args += ["--selector", format_selector(match_labels)]
        return self._build(args, env)

    def patch(
        self,
        type_: str,
        namespace: NamespaceArg,
        name: str,
        patch_data: str,
        patch_type: str = "merge",
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace) + ["patch", type_, name]
        args += ["-p", shlex.quote(patch_data)]
        args += ["--type", patch_type]
        return self._build(args, env)

    def annotate(
        self,
        type_: str,
        namespace: NamespaceArg,
        name: str,
        annotations: Mapping[str, str],
        overwrite: bool = True,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace) + ["annotate"]
        if overwrite:
            args.append("--overwrite")
        args += [type_, name]
        for key, value in annotations.items():
            args.append(f"{shell_quote(str(key))}={shell_quote(str(value))}")
        return self._build(args, env)

    def logs(
        self,
        namespace: NamespaceArg,
        selector: Mapping[str, str],
        follow: bool = True,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace) + ["logs"]
        if follow:
            args.append("-f")
        args += ["--selector", format_selector(selector)]
        return self._build(args, env)

    def current_context(self, env: Optional[Mapping[str, str]] = None) -> Invocation:
        return self._build(["config", "current-context"], env)

    def api_resources(self, env: Optional[Mapping[str, str]] = None) -> Invocation:
        return self._build(["api-resources"], env)

    def restart_deployment(
        self,
        namespace: NamespaceArg,
        deployment: str,
        env: Optional[Mapping[str, str]] = None,
    ) -> Invocation:
        args = self.namespace_flags(namespace)
        args += ["rollout", "restart", "deployment", deployment]
        return self._build(args, env)


__all__ = [
    "ALL_NAMESPACES",
    "CommandBuilder",
    "Invocation",
    "NamespaceScope",
    "describe_namespace",
    "format_selector",
    "shell_quote",
]
