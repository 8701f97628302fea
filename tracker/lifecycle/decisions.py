"""Pure decision functions for the tracker engines.

Each function takes plain inputs (no ledger, no block graph, no chain API) and
returns outcomes or Effect objects. The engines gather the inputs and apply
the state changes; the ordering rules live here and are testable without mocks.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from tracker.lifecycle.effects import (
    Effect,
    TxDoneEffect,
    TxSettledEffect,
    UnpinEffect,
)
from tracker.lifecycle.types import BlockHash, Outcome


# ── Settlement ─────────────────────────────────────────────────────


def select_included(pending: Iterable[Any], body: Iterable[Any]) -> list[Any]:
    """Return the pending transactions present in ``body``, in arrival order.

    Block-body order is ignored; only the order of ``pending`` matters.
    """
    included = set(body)
    return [tx for tx in pending if tx in included]


def decide_outcome(
    block_hash: BlockHash, is_valid: bool, is_successful: bool | None = None
) -> Outcome:
    """Classify a transaction found in a block.

    ``is_successful`` is ignored for invalid transactions and must be provided
    for valid ones.
    """
    if not is_valid:
        return Outcome.invalid(block_hash)
    if is_successful is None:
        raise ValueError(f"Valid transaction in {block_hash} needs a success flag")
    return Outcome.valid(block_hash, bool(is_successful))


def decide_settled(tx: Any, outcome: Outcome) -> list[Effect]:
    return [TxSettledEffect(tx=tx, outcome=outcome)]


# ── Finalization ───────────────────────────────────────────────────


def decide_done(
    chain: Sequence[BlockHash],
    settled_by_block: dict[BlockHash, list[tuple[Any, Outcome]]],
) -> list[Effect]:
    """Decide done notifications for a reconstructed finalized chain.

    Args:
        chain: Newly finalized block hashes, oldest first.
        settled_by_block: For each block, its settled transactions with their
                          outcomes, already in arrival order.

    Returns:
        One TxDoneEffect per transaction: blocks in chain order, transactions
        in arrival order within a block.
    """
    effects: list[Effect] = []
    for block_hash in chain:
        for tx, outcome in settled_by_block.get(block_hash, []):
            effects.append(TxDoneEffect(tx=tx, outcome=outcome))
    return effects


def decide_unpin(obsolete: Iterable[BlockHash], unpin_enabled: bool) -> list[Effect]:
    """At most one UnpinEffect per finalization, none when there is nothing to release."""
    hashes = tuple(obsolete)
    if not unpin_enabled or not hashes:
        return []
    return [UnpinEffect(block_hashes=hashes)]
