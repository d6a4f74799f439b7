from typing import Dict, Iterable, Optional, Sequence, Tuple

import pytest

from gitsmart.git_adapter import GitRunner


class FakeRunner(GitRunner):
    """
    GitRunner answering from canned responses instead of spawning git.

    Any query without a canned response behaves like a failed command.
    """

    def __init__(
        self,
        outputs: Optional[Dict[Tuple[str, ...], str]] = None,
        successes: Iterable[Tuple[str, ...]] = (),
        cwd: Optional[str] = None,
    ):
        super().__init__(cwd=cwd)
        self.outputs = dict(outputs or {})
        self.successes = set(successes)
        self.calls = []

    def output(self, args: Sequence[str]) -> Optional[str]:
        self.calls.append(tuple(args))
        return self.outputs.get(tuple(args))

    def succeeds(self, args: Sequence[str]) -> bool:
        self.calls.append(tuple(args))
        return tuple(args) in self.successes


@pytest.fixture
def make_runner():
    return FakeRunner
