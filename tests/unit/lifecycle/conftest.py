"""
Fixtures for lifecycle tests: an in-memory chain source and a recording output.
"""

from collections import Counter

import pytest

from tracker.lifecycle.tracker import TransactionTracker


class FakeChain:
    """In-memory ChainAPI. Blocks are added with ``add_block`` before they are announced."""

    def __init__(self):
        self.bodies = {}
        self.invalid = set()
        self.unsuccessful = set()
        self.failing = set()
        self.calls = Counter()
        self.unpinned = []

    def add_block(self, block_hash, body, invalid=(), unsuccessful=()):
        self.bodies[block_hash] = list(body)
        for tx in invalid:
            self.invalid.add((block_hash, tx))
        for tx in unsuccessful:
            self.unsuccessful.add((block_hash, tx))

    def _maybe_fail(self, method, block_hash, tx=None):
        if (method, block_hash, tx) in self.failing:
            raise ConnectionError(f"{method} unavailable")

    def get_body(self, block_hash):
        self.calls["get_body"] += 1
        self._maybe_fail("get_body", block_hash)
        return self.bodies.get(block_hash, [])

    def is_tx_valid(self, block_hash, tx):
        self.calls["is_tx_valid"] += 1
        self._maybe_fail("is_tx_valid", block_hash, tx)
        return (block_hash, tx) not in self.invalid

    def is_tx_successful(self, block_hash, tx):
        self.calls["is_tx_successful"] += 1
        self._maybe_fail("is_tx_successful", block_hash, tx)
        return (block_hash, tx) not in self.unsuccessful

    def unpin(self, block_hashes):
        self.unpinned.append(list(block_hashes))


class RecordingOutput:
    def __init__(self):
        self.calls = []

    def on_tx_settled(self, tx, outcome):
        self.calls.append(("settled", tx, outcome))

    def on_tx_done(self, tx, outcome):
        self.calls.append(("done", tx, outcome))

    def settled(self):
        return [(tx, outcome) for kind, tx, outcome in self.calls if kind == "settled"]

    def done(self):
        return [(tx, outcome) for kind, tx, outcome in self.calls if kind == "done"]

    def clear(self):
        self.calls.clear()


@pytest.fixture(autouse=True)
def clean_tracker_env(monkeypatch):
    """Keep a developer's .env from leaking into tracker defaults."""
    monkeypatch.delenv("TRACKER_UNPIN_ENABLED", raising=False)
    monkeypatch.delenv("TRACKER_INITIAL_FINALIZED", raising=False)
    monkeypatch.delenv("TRACKER_RETIRED_CAPACITY", raising=False)


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def output():
    return RecordingOutput()


@pytest.fixture
def tracker(chain, output):
    return TransactionTracker(chain, output)
