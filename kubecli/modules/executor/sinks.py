"""
Output sink registry.

Holds the stdout/stderr targets that relayed child output is written to.
Overrides are scoped per execution context (thread or asyncio task) and
restored when the scope exits, including on error.
"""

import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import IO, Iterator, Optional, Tuple

Sink = IO[str]

# (stdout, stderr); None means the process stream
_SinkPair = Tuple[Optional[Sink], Optional[Sink]]


class OutputSinks:
    """Per-context stdout/stderr redirection targets."""

    def __init__(self):
        self._current: ContextVar[_SinkPair] = ContextVar(
            f"kubecli_sinks_{id(self)}", default=(None, None)
        )

    @property
    def stdout(self) -> Sink:
        return self._current.get()[0] or sys.stdout

    @property
    def stderr(self) -> Sink:
        return self._current.get()[1] or sys.stderr

    def is_default(self) -> bool:
        """True when no override is installed in the calling context."""
        out, err = self._current.get()
        return out is None and err is None

    @contextmanager
    def redirect(
        self, out: Optional[Sink] = None, err: Optional[Sink] = None
    ) -> Iterator["OutputSinks"]:
        """
        Install ``out``/``err`` for the duration of the block.

        Passing None for either stream selects the process stream.
        """
        token = self._current.set((out, err))
        try:
            yield self
        finally:
            self._current.reset(token)
