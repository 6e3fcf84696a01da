from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest

from n7_telemetry.command_runner import CommandResult


class FakeCommandRunner:
    """
    Scripted CommandRunner. Responses are keyed by the exact argument tuple;
    a string means success with that stdout. Unknown commands fail, as if the
    tool were missing from the host.
    """

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], Union[str, CommandResult]]] = None):
        self.responses = dict(responses or {})
        self.calls: List[Tuple[str, ...]] = []

    async def run(self, args: Sequence[str]) -> CommandResult:
        key = tuple(args)
        self.calls.append(key)
        response = self.responses.get(key)
        if response is None:
            return CommandResult(succeeded=False, stderr="command not found")
        if isinstance(response, CommandResult):
            return response
        return CommandResult(succeeded=True, stdout=response)


@pytest.fixture
def make_runner():
    return FakeCommandRunner


@pytest.fixture
def failing_runner():
    return FakeCommandRunner()


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'telemetry.db'}"
