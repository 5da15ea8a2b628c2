"""
Shared pytest fixtures for kubecli tests.

This module provides:
- KubectlMocker: intercepts subprocess.Popen / subprocess.run / os.execve
  and answers kubectl command lines with canned responses
- cli / fake_cli fixtures wired to a fixed kubeconfig path
"""

import io
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Union
from unittest.mock import MagicMock, patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kubecli import KubernetesCLI  # noqa: E402

KUBECONFIG_PATH = "/home/test/.kube/config"
KUBECTL = "/usr/local/bin/kubectl"


# =============================================================================
# Kubectl Mocking Infrastructure
# =============================================================================

@dataclass
class KubectlResponse:
    """Represents a mocked kubectl command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


@dataclass
class KubectlCall:
    """Record of a kubectl call made during testing."""
    command_line: str
    mode: str
    env: Dict[str, str] = field(default_factory=dict)
    stdin: Optional[str] = None
    matched_pattern: Optional[str] = None

    @property
    def args(self) -> List[str]:
        return self.command_line.split(" ")

    def includes(self, *args: str) -> bool:
        size = len(args)
        return any(
            tuple(self.args[i : i + size]) == args for i in range(len(self.args) - size + 1)
        )

    def redirects_to(self, path: str) -> bool:
        return self.args[-2:] == [">", path]


class RecordingStdin(io.StringIO):
    """Child stdin that remembers what was written once closed."""

    def __init__(self, call: KubectlCall):
        super().__init__()
        self._call = call

    def close(self):
        if not self.closed:
            self._call.stdin = self.getvalue()
        super().close()


class FakeProcess:
    """Stands in for subprocess.Popen."""

    def __init__(self, response: KubectlResponse, call: KubectlCall):
        self.stdin = RecordingStdin(call)
        self.stdout = io.StringIO(response.stdout)
        self.stderr = io.StringIO(response.stderr)
        self.returncode = None
        self._response = response

    def wait(self, timeout=None):
        self.returncode = self._response.returncode
        return self.returncode


class KubectlMocker:
    """
    Mock kubectl process spawning with pattern-matched responses.

    Usage:
        def test_get(kubectl_mocker, cli):
            kubectl_mocker.register("get ConfigMap", KubectlResponse(stdout="{}"))
            cli.get_object("ConfigMap", "test", "x")
            assert kubectl_mocker.was_called_with("get ConfigMap x")
    """

    def __init__(self):
        self._responses: List[tuple] = []
        self._call_history: List[KubectlCall] = []
        self._default_response = KubectlResponse(
            stderr="Error: mock not configured for this command",
            returncode=1
        )

    def register(
        self,
        pattern: Union[str, Pattern],
        response: KubectlResponse,
        priority: int = 0
    ) -> "KubectlMocker":
        """Register a response for command lines matching the pattern."""
        self._responses.append((pattern, response, priority))
        self._responses.sort(key=lambda x: x[2], reverse=True)
        return self

    def set_default_response(self, response: KubectlResponse) -> "KubectlMocker":
        self._default_response = response
        return self

    def _match(self, command_line: str, mode: str, env: Optional[dict]) -> tuple:
        matched_pattern = None
        response = self._default_response

        for pattern, resp, _ in self._responses:
            if isinstance(pattern, str):
                if pattern in command_line:
                    matched_pattern = pattern
                    response = resp
                    break
            elif pattern.search(command_line):
                matched_pattern = pattern.pattern
                response = resp
                break

        call = KubectlCall(
            command_line=command_line,
            mode=mode,
            env=dict(env or {}),
            matched_pattern=matched_pattern,
        )
        self._call_history.append(call)
        return call, response

    def mock_popen(self, cmd, shell=False, env=None, **kwargs) -> FakeProcess:
        call, response = self._match(cmd, "popen", env)
        return FakeProcess(response, call)

    def mock_run(self, cmd, shell=False, env=None, **kwargs) -> MagicMock:
        # Direct inheritance: the child would write to our own streams
        call, response = self._match(cmd, "run", env)
        sys.stdout.write(response.stdout)
        sys.stderr.write(response.stderr)
        result = MagicMock()
        result.returncode = response.returncode
        return result

    def mock_execve(self, path, argv, env) -> None:
        self._match(argv[-1], "exec", env)

    @property
    def calls(self) -> List[KubectlCall]:
        return self._call_history

    @property
    def last_call(self) -> KubectlCall:
        return self._call_history[-1]

    @property
    def call_count(self) -> int:
        return len(self._call_history)

    def was_called_with(self, pattern: str) -> bool:
        return any(pattern in call.command_line for call in self._call_history)

    def get_calls_matching(self, pattern: str) -> List[KubectlCall]:
        return [c for c in self._call_history if pattern in c.command_line]

    def reset(self):
        self._call_history = []


@pytest.fixture
def kubectl_mocker():
    """KubectlMocker with process spawning patched."""
    mocker = KubectlMocker()
    with patch("subprocess.Popen", side_effect=mocker.mock_popen), \
            patch("subprocess.run", side_effect=mocker.mock_run), \
            patch("os.execve", side_effect=mocker.mock_execve) as execve:
        mocker.execve = execve
        yield mocker


@pytest.fixture
def cli():
    return KubernetesCLI(KUBECONFIG_PATH, KUBECTL)


@pytest.fixture
def quiet_cli(cli):
    """Client with child output sent to throwaway buffers."""
    with cli.with_pipes(io.StringIO(), io.StringIO()):
        yield cli


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "kubectl_mock: Tests using mocked kubectl process calls"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests requiring a real cluster"
    )
