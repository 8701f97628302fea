from __future__ import annotations

from typing import Iterable, Protocol

from tracker.lifecycle.types import BlockHash, Outcome, Transaction


class ChainAPI(Protocol):
    """Queries answered by the chain-notification source.

    Assumed side-effect free and deterministic for a given (block, tx) pair.
    """

    def get_body(self, block_hash: BlockHash) -> Iterable[Transaction]: ...

    def is_tx_valid(self, block_hash: BlockHash, tx: Transaction) -> bool: ...

    def is_tx_successful(self, block_hash: BlockHash, tx: Transaction) -> bool: ...

    def unpin(self, block_hashes: list[BlockHash]) -> None: ...


class OutputAPI(Protocol):
    """Receives at most one call per transaction per milestone."""

    def on_tx_settled(self, tx: Transaction, outcome: Outcome) -> None: ...

    def on_tx_done(self, tx: Transaction, outcome: Outcome) -> None: ...
