"""
Brief: Global pytest configuration: per-test timeout plus shared fakes.

Inputs:
  - None

Outputs:
  - None
"""

import os
import signal
import sys
from typing import Dict, List

import pytest

# Ensure 'src' is on sys.path so 'resolvescope' is importable in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from resolvescope.strategies import (  # noqa: E402
    AddressStrategy,
    LookupFailure,
    ResolutionStrategy,
)


def _alarm_handler(signum, frame):
    raise TimeoutError("Test exceeded 10 seconds")


if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        yield


class FakeClock:
    """Brief: Manually advanced wall clock for expiry tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStrategy(AddressStrategy):
    """Brief: In-memory strategy answering from a dict and counting lookups.

    Inputs:
      - answers: host -> address, or host -> LookupFailure to raise.
    """

    def __init__(self, answers=None, **config) -> None:
        super().__init__(**config)
        self.answers: Dict[str, object] = dict(answers or {})
        self.calls: List[str] = []

    def lookup(self, host: str) -> str:
        self.calls.append(host)
        answer = self.answers.get(host)
        if isinstance(answer, LookupFailure):
            raise answer
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            return ""
        return str(answer)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_strategies():
    """
    Brief: One FakeStrategy per ResolutionStrategy member.

    Outputs:
      - dict mapping ResolutionStrategy -> FakeStrategy; system and google
        answer example.com differently so cache separation is observable.
    """
    return {
        ResolutionStrategy.SYSTEM: FakeStrategy({"example.com": "93.184.216.34"}),
        ResolutionStrategy.GOOGLE: FakeStrategy({"example.com": "93.184.216.35"}),
        ResolutionStrategy.CLOUDFLARE: FakeStrategy({"example.com": "93.184.216.36"}),
    }
