"""
Execution engine for kubectl invocations.

Runs an ``Invocation`` in one of four modes:

- replace: the current process image becomes the child (never returns)
- system: run to completion, child output streamed to the active sinks
- capture: run to completion, stdout collected and returned
- pipe_write: like system, with a caller-supplied writer feeding stdin

Synchronous modes record the outcome as the last status of the calling
execution context and fire after-hooks. Replace mode only fires
before-hooks, since nothing runs after the exec.
"""

import asyncio
import io
import logging
import os
import subprocess
import sys
from contextvars import ContextVar
from dataclasses import dataclass
from threading import Thread, get_ident
from typing import IO, Any, Callable, Iterable, List, NoReturn, Optional, Tuple

from kubecli.modules.executor.commands import Invocation
from kubecli.modules.executor.errors import LastStatusUnavailableError
from kubecli.modules.executor.sinks import OutputSinks

logger = logging.getLogger("kubecli.engine")

SHELL = "/bin/sh"


@dataclass(frozen=True)
class ExecutionOutcome:
    """Exit status of a completed invocation, plus stdout in capture mode."""

    exit_code: int
    stdout: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0


BeforeHook = Callable[[Invocation], None]
AfterHook = Callable[[Invocation, ExecutionOutcome], None]
StdinWriter = Callable[[IO[str]], None]


def _relay(source: IO[str], sink: IO[str]) -> None:
    """Copy lines from a child stream to a sink until the stream is exhausted."""
    try:
        for line in source:
            sink.write(line)
            sink.flush()
    except (OSError, ValueError) as e:
        # Stream closed underneath us; the child is gone
        logger.debug(f"Relay stopped: {e}")


def _context_owner() -> Any:
    """The running asyncio task, or the current thread outside an event loop."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    return task if task is not None else get_ident()


def _start_relay(source: IO[str], sink: IO[str]) -> Thread:
    thread = Thread(target=_relay, args=(source, sink), daemon=True)
    thread.start()
    return thread


class ExecutionEngine:
    """Spawns kubectl command lines and tracks their exit status per context."""

    def __init__(
        self,
        sinks: Optional[OutputSinks] = None,
        before_execute: Iterable[BeforeHook] = (),
        after_execute: Iterable[AfterHook] = (),
    ):
        self.sinks = sinks or OutputSinks()
        self.before_execute: Tuple[BeforeHook, ...] = tuple(before_execute)
        self.after_execute: Tuple[AfterHook, ...] = tuple(after_execute)
        # (owner, outcome); tasks inherit a copy of their parent's context
        self._last_status: ContextVar[Optional[Tuple[Any, ExecutionOutcome]]] = ContextVar(
            f"kubecli_last_status_{id(self)}", default=None
        )

    @property
    def last_status(self) -> ExecutionOutcome:
        """
        Outcome of the most recent invocation in the calling context.

        Raises:
            LastStatusUnavailableError: If nothing has run in this context yet
        """
        recorded = self._last_status.get()
        if recorded is None or recorded[0] != _context_owner():
            raise LastStatusUnavailableError(
                "no kubectl command has completed in this execution context"
            )
        return recorded[1]

    def replace(self, invocation: Invocation) -> NoReturn:
        """Replace the current process with the kubectl command."""
        self._run_before_hooks(invocation)
        logger.debug(f"Exec: {invocation.command_line}")
        env = self._environ(invocation)

        for stream in (sys.stdout, sys.stderr):
            stream.flush()

        if os.name == "posix":
            os.execve(SHELL, [SHELL, "-c", invocation.command_line], env)
        else:
            # No exec primitive: spawn, then exit with the child's status
            sys.exit(subprocess.call(invocation.command_line, shell=True, env=env))

    def system(self, invocation: Invocation) -> ExecutionOutcome:
        """Run to completion, streaming output to the active sinks."""
        self._run_before_hooks(invocation)
        logger.debug(f"Running: {invocation.command_line}")

        if self.sinks.is_default():
            # Child inherits our stdout/stderr directly
            process = subprocess.run(
                invocation.command_line,
                shell=True,
                env=self._environ(invocation),
                stdin=subprocess.DEVNULL,
            )
            outcome = ExecutionOutcome(exit_code=process.returncode)
        else:
            outcome = self._popen(invocation, self.sinks.stdout)

        return self._complete(invocation, outcome)

    def capture(self, invocation: Invocation) -> ExecutionOutcome:
        """Run to completion and return stdout; stderr still goes to the sink."""
        self._run_before_hooks(invocation)
        logger.debug(f"Capturing: {invocation.command_line}")

        buffer = io.StringIO()
        outcome = self._popen(invocation, buffer)
        outcome = ExecutionOutcome(exit_code=outcome.exit_code, stdout=buffer.getvalue())
        return self._complete(invocation, outcome)

    def pipe_write(self, invocation: Invocation, writer: StdinWriter) -> ExecutionOutcome:
        """Run to completion after letting ``writer`` feed the child's stdin."""
        self._run_before_hooks(invocation)
        logger.debug(f"Piping to: {invocation.command_line}")

        outcome = self._popen(invocation, self.sinks.stdout, writer)
        return self._complete(invocation, outcome)

    def _popen(
        self,
        invocation: Invocation,
        stdout_sink: IO[str],
        writer: Optional[StdinWriter] = None,
    ) -> ExecutionOutcome:
        process = subprocess.Popen(
            invocation.command_line,
            shell=True,
            env=self._environ(invocation),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
        )

        relays: List[Thread] = [
            _start_relay(process.stdout, stdout_sink),
            _start_relay(process.stderr, self.sinks.stderr),
        ]

        try:
            if writer is not None:
                try:
                    writer(process.stdin)
                except BrokenPipeError:
                    logger.debug("Child closed stdin before input was fully written")
        finally:
            try:
                process.stdin.close()
            except BrokenPipeError:
                logger.debug("Child exited before stdin was flushed")
            exit_code = process.wait()
            for relay in relays:
                relay.join()
            process.stdout.close()
            process.stderr.close()

        return ExecutionOutcome(exit_code=exit_code)

    def _complete(self, invocation: Invocation, outcome: ExecutionOutcome) -> ExecutionOutcome:
        self._last_status.set((_context_owner(), outcome))
        if not outcome.success:
            logger.warning(
                f"kubectl exited with status code {outcome.exit_code}: {invocation.command_line}"
            )
        for hook in self.after_execute:
            hook(invocation, outcome)
        return outcome

    def _run_before_hooks(self, invocation: Invocation) -> None:
        for hook in self.before_execute:
            hook(invocation)

    @staticmethod
    def _environ(invocation: Invocation) -> dict:
        env = dict(os.environ)
        env.update(invocation.env)
        return env
