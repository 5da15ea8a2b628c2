"""
KubernetesCLI - drive a kubectl-compatible executable.

Each public method builds an Invocation, runs it through the execution
engine in the mode the operation needs, then turns the outcome into a
return value or a typed KubernetesError.
"""

import json
import logging
from contextlib import contextmanager
from typing import IO, Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Type

from kubecli.modules.config import get_config
from kubecli.modules.executor import (
    AnnotateResourceError,
    CommandBuilder,
    DeleteResourceError,
    ExecutionEngine,
    ExecutionOutcome,
    GetResourceError,
    GetResourceParseError,
    GetVersionError,
    GetVersionParseError,
    InvalidResourceError,
    InvalidResourceUriError,
    KubernetesError,
    OutputSinks,
    PatchResourceError,
    describe_namespace,
)
from kubecli.modules.executor.commands import CommandArg, NamespaceArg
from kubecli.modules.executor.engine import AfterHook, BeforeHook
from kubecli.modules.resource import ResourceLike

logger = logging.getLogger("kubecli.cli")


def _decode_json(text: str, error_cls: Type[KubernetesError]) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise error_cls(f"json parsing error: {e}") from e


class KubernetesCLI:
    """Client that shells out to kubectl for every operation."""

    def __init__(
        self,
        kubeconfig_path: str,
        executable: Optional[str] = None,
        before_execute: Iterable[BeforeHook] = (),
        after_execute: Iterable[AfterHook] = (),
        env: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            kubeconfig_path: Passed to every command as --kubeconfig
            executable: kubectl binary; defaults to the configured one
            before_execute: Called with each Invocation before it is spawned
            after_execute: Called with each Invocation and its outcome
            env: Environment overrides merged over os.environ
        """
        self.kubeconfig_path = kubeconfig_path
        self.executable = executable or get_config().get("executable")
        self.env: Dict[str, str] = dict(env or {})
        self.commands = CommandBuilder(self.executable, self.kubeconfig_path)
        self.sinks = OutputSinks()
        self.engine = ExecutionEngine(self.sinks, before_execute, after_execute)

    @classmethod
    def from_config(cls, **kwargs) -> "KubernetesCLI":
        """Build a client from the environment-driven configuration."""
        config = get_config()
        return cls(config.get("kubeconfig_path"), config.get("executable"), **kwargs)

    # Last status

    @property
    def last_status(self) -> ExecutionOutcome:
        return self.engine.last_status

    def with_last_status(self, callback: Callable[[ExecutionOutcome], None]) -> None:
        callback(self.last_status)

    def on_last_status_failure(self, callback: Callable[[ExecutionOutcome], None]) -> None:
        """Call ``callback`` with the last status if it was a failure."""
        status = self.last_status
        if not status.success:
            callback(status)

    # Output redirection

    @contextmanager
    def with_pipes(
        self, out: Optional[IO[str]] = None, err: Optional[IO[str]] = None
    ) -> Iterator["KubernetesCLI"]:
        """Send child output to ``out``/``err`` for the duration of the block."""
        with self.sinks.redirect(out, err):
            yield self

    @property
    def stdout(self) -> IO[str]:
        return self.sinks.stdout

    @property
    def stderr(self) -> IO[str]:
        return self.sinks.stderr

    # Operations

    def version(self) -> Dict[str, Any]:
        outcome = self.engine.capture(self.commands.version(env=self.env))
        self._raise_on_failure(outcome, GetVersionError, "couldn't get version info")
        return _decode_json(outcome.stdout, GetVersionParseError)

    def run_cmd(self, cmd: CommandArg) -> None:
        self.engine.replace(self.commands.raw(cmd, env=self.env))

    def exec_cmd(
        self,
        container_cmd: CommandArg,
        namespace: str,
        pod: str,
        tty: bool = True,
        container: Optional[str] = None,
        out_file: Optional[str] = None,
    ) -> None:
        invocation = self.commands.exec(
            container_cmd, namespace, pod, tty, container, out_file, env=self.env
        )
        self.engine.replace(invocation)

    def system_cmd(
        self,
        container_cmd: CommandArg,
        namespace: str,
        pod: str,
        tty: bool = True,
        container: Optional[str] = None,
    ) -> ExecutionOutcome:
        """Run a command in a pod and wait; the outcome is also the last status."""
        invocation = self.commands.exec(container_cmd, namespace, pod, tty, container, env=self.env)
        return self.engine.system(invocation)

    def apply(self, res: ResourceLike, dry_run: bool = False) -> None:
        logger.info(f"Applying {res.kind} '{res.metadata.name}'" + (" (dry run)" if dry_run else ""))
        document = res.to_yaml()
        invocation = self.commands.apply("-", dry_run=dry_run, env=self.env)

        def write_manifest(stdin: IO[str]) -> None:
            stdin.write(document)
            if not document.endswith("\n"):
                stdin.write("\n")

        outcome = self.engine.pipe_write(invocation, write_manifest)

        if not outcome.success:
            raise InvalidResourceError(
                f"Could not apply {res.kind} '{res.metadata.name}': "
                f"kubectl exited with status code {outcome.exit_code}",
                exit_code=outcome.exit_code,
                resource=res,
            )

    def apply_uri(self, uri: str, dry_run: bool = False) -> None:
        outcome = self.engine.system(self.commands.apply(uri, dry_run=dry_run, env=self.env))

        if not outcome.success:
            raise InvalidResourceUriError(
                f"Could not apply {uri}: kubectl exited with status code {outcome.exit_code}",
                exit_code=outcome.exit_code,
                resource_uri=uri,
            )

    def get_object(self, type_: str, namespace: NamespaceArg, name: str) -> Dict[str, Any]:
        outcome = self.engine.capture(self.commands.get(type_, namespace, name, env=self.env))
        self._raise_on_failure(
            outcome,
            GetResourceError,
            f"couldn't get resource of type '{type_}' named '{name}' "
            f"in {describe_namespace(namespace)}",
        )
        return _decode_json(outcome.stdout, GetResourceParseError)

    def get_objects(
        self,
        type_: str,
        namespace: NamespaceArg,
        match_labels: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        invocation = self.commands.get_many(type_, namespace, match_labels, env=self.env)
        outcome = self.engine.capture(invocation)
        self._raise_on_failure(
            outcome,
            GetResourceError,
            f"couldn't get resources of type '{type_}' in {describe_namespace(namespace)}",
        )

        data = _decode_json(outcome.stdout, GetResourceParseError)
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            raise GetResourceParseError("json parsing error: expected an object with 'items'")
        return data["items"]

    def delete_object(self, type_: str, namespace: NamespaceArg, name: str) -> None:
        outcome = self.engine.system(self.commands.delete(type_, namespace, name, env=self.env))
        self._raise_on_failure(
            outcome,
            DeleteResourceError,
            f"couldn't delete resource of type '{type_}' named '{name}' "
            f"in {describe_namespace(namespace)}",
        )

    def delete_objects(
        self,
        type_: str,
        namespace: NamespaceArg,
        match_labels: Optional[Mapping[str, str]] = None,
    ) -> None:
        invocation = self.commands.delete_many(type_, namespace, match_labels, env=self.env)
        outcome = self.engine.system(invocation)
        self._raise_on_failure(
            outcome,
            DeleteResourceError,
            f"couldn't delete resources of type '{type_}' in {describe_namespace(namespace)}",
        )

    def patch_object(
        self,
        type_: str,
        namespace: NamespaceArg,
        name: str,
        patch_data: str,
        patch_type: str = "merge",
    ) -> None:
        invocation = self.commands.patch(
            type_, namespace, name, patch_data, patch_type, env=self.env
        )
        outcome = self.engine.system(invocation)
        self._raise_on_failure(
            outcome,
            PatchResourceError,
            f"couldn't patch resource of type '{type_}' named '{name}' "
            f"in {describe_namespace(namespace)}",
        )

    def annotate(
        self,
        type_: str,
        namespace: NamespaceArg,
        name: str,
        annotations: Mapping[str, str],
        overwrite: bool = True,
    ) -> None:
        invocation = self.commands.annotate(
            type_, namespace, name, annotations, overwrite, env=self.env
        )
        outcome = self.engine.system(invocation)
        self._raise_on_failure(
            outcome, AnnotateResourceError, f"could not annotate resource '{name}'"
        )

    def logtail(self, namespace: str, selector: Mapping[str, str], follow: bool = True) -> None:
        self.engine.replace(self.commands.logs(namespace, selector, follow, env=self.env))

    def current_context(self) -> str:
        outcome = self.engine.capture(self.commands.current_context(env=self.env))
        self._raise_on_failure(outcome, KubernetesError, "could not fetch current context")
        return outcome.stdout.strip()

    def api_resources(self) -> str:
        outcome = self.engine.capture(self.commands.api_resources(env=self.env))
        if not outcome.success:
            raise KubernetesError(
                "could not fetch API resources: kubectl exited with "
                f"status code {outcome.exit_code}. {outcome.stdout}",
                exit_code=outcome.exit_code,
            )
        return outcome.stdout

    def restart_deployment(self, namespace: str, deployment: str) -> None:
        logger.info(f"Restarting deployment {deployment} in namespace {namespace}")
        outcome = self.engine.system(
            self.commands.restart_deployment(namespace, deployment, env=self.env)
        )
        self._raise_on_failure(outcome, KubernetesError, "could not restart deployment")

    @staticmethod
    def _raise_on_failure(
        outcome: ExecutionOutcome, error_cls: Type[KubernetesError], context: str
    ) -> None:
        if not outcome.success:
            raise error_cls(
                f"{context}: kubectl exited with status code {outcome.exit_code}",
                exit_code=outcome.exit_code,
            )
