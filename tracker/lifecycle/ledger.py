from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional

from loguru import logger

from tracker.lifecycle.types import BlockHash, Outcome, TransactionStatus

DEFAULT_RETIRED_CAPACITY = 100_000


@dataclass
class LedgerEntry:
    """Lifecycle record of one observed transaction."""

    tx: Any
    seq: int
    status: TransactionStatus = TransactionStatus.PENDING
    block_hash: Optional[BlockHash] = None
    outcome: Optional[Outcome] = None


class TransactionLedger:
    """
    Every observed transaction that has not reached DONE, keyed by identity.

    ``seq`` is the arrival index; dict insertion order matches it, so pending
    iteration needs no sorting. Settled transactions are also indexed by the
    block they settled in.

    Identities that left the ledger (DONE or orphaned) are remembered, up to
    ``retired_capacity`` of the most recent ones, so a re-delivery cannot
    start a second lifecycle.
    """

    def __init__(self, retired_capacity: int = DEFAULT_RETIRED_CAPACITY):
        self._entries: dict[Any, LedgerEntry] = {}
        self._by_block: dict[BlockHash, dict[Any, None]] = {}
        self._retired: dict[Any, None] = {}
        self._retired_capacity = retired_capacity
        self._next_seq = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, tx: Any) -> bool:
        return tx in self._entries

    def record(self, tx: Any) -> bool:
        """Append a PENDING entry. Returns False if ``tx`` is already known or retired."""
        if tx in self._entries or tx in self._retired:
            logger.debug(f"[LEDGER] Ignoring re-delivered transaction {tx!r}")
            return False
        self._entries[tx] = LedgerEntry(tx=tx, seq=self._next_seq)
        self._next_seq += 1
        return True

    def mark_settled(self, tx: Any, block_hash: BlockHash, outcome: Outcome) -> bool:
        entry = self._entries.get(tx)
        if entry is None or entry.status is not TransactionStatus.PENDING:
            logger.warning(
                f"[LEDGER] mark_settled on non-pending transaction {tx!r} "
                f"(block {block_hash}), ignoring"
            )
            return False
        entry.status = TransactionStatus.SETTLED
        entry.block_hash = block_hash
        entry.outcome = outcome
        self._by_block.setdefault(block_hash, {})[tx] = None
        return True

    def mark_done(self, tx: Any) -> bool:
        """SETTLED -> DONE. The entry is removed; no further notifications are possible."""
        entry = self._entries.get(tx)
        if entry is None or entry.status is not TransactionStatus.SETTLED:
            return False
        entry.status = TransactionStatus.DONE
        self._remove(entry)
        return True

    def forget(self, tx: Any) -> bool:
        """Drop a SETTLED entry whose block was pruned without being finalized."""
        entry = self._entries.get(tx)
        if entry is None or entry.status is not TransactionStatus.SETTLED:
            return False
        self._remove(entry)
        return True

    def _remove(self, entry: LedgerEntry) -> None:
        del self._entries[entry.tx]
        block_txs = self._by_block.get(entry.block_hash)
        if block_txs is not None:
            block_txs.pop(entry.tx, None)
            if not block_txs:
                del self._by_block[entry.block_hash]
        self._retire(entry.tx)

    def _retire(self, tx: Any) -> None:
        if self._retired_capacity <= 0:
            return
        self._retired[tx] = None
        while len(self._retired) > self._retired_capacity:
            del self._retired[next(iter(self._retired))]

    def is_retired(self, tx: Any) -> bool:
        return tx in self._retired

    def pending(self) -> Iterator[Any]:
        """PENDING transactions in arrival order.

        Returns a snapshot so callers may settle transactions while iterating.
        """
        return iter(
            [
                entry.tx
                for entry in self._entries.values()
                if entry.status is TransactionStatus.PENDING
            ]
        )

    def settled_in(self, block_hash: BlockHash) -> list[tuple[Any, Outcome]]:
        """SETTLED transactions of ``block_hash`` with their outcomes, in arrival order."""
        entries = [self._entries[tx] for tx in self._by_block.get(block_hash, {})]
        entries.sort(key=lambda entry: entry.seq)
        return [(entry.tx, entry.outcome) for entry in entries]

    def status(self, tx: Any) -> Optional[TransactionStatus]:
        """Current status, or None for unknown and already-DONE transactions."""
        entry = self._entries.get(tx)
        return entry.status if entry is not None else None

    def outcome(self, tx: Any) -> Optional[Outcome]:
        entry = self._entries.get(tx)
        return entry.outcome if entry is not None else None
