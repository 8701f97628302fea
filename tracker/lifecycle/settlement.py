from __future__ import annotations

from typing import Any

from loguru import logger

from tracker.lifecycle.decisions import decide_outcome, decide_settled, select_included
from tracker.lifecycle.effects import Effect
from tracker.lifecycle.errors import ChainQueryError
from tracker.lifecycle.events import NewBlockEvent
from tracker.lifecycle.interfaces import ChainAPI
from tracker.lifecycle.state import TrackerState
from tracker.lifecycle.types import BlockHash


class SettlementEngine:
    """Settles pending transactions against announced blocks.

    Every block body is fetched once and kept on the block node. A block is
    marked scanned only after all of its queries succeeded; unscanned blocks
    are retried, oldest first, on every following event.
    """

    def __init__(self, state: TrackerState, chain: ChainAPI):
        self.state = state
        self.chain = chain

    def on_new_block(self, event: NewBlockEvent) -> list[Effect]:
        self.state.blocks.ensure_block(event.block_hash, event.parent)
        return self.scan_unscanned()

    def scan_unscanned(self) -> list[Effect]:
        """Scan every retained block that has not been fully scanned yet."""
        effects: list[Effect] = []
        for block_hash in self.state.blocks.unscanned():
            effects.extend(self._scan(block_hash))
        return effects

    def _scan(self, block_hash: BlockHash) -> list[Effect]:
        blocks = self.state.blocks
        ledger = self.state.ledger
        node = blocks.get(block_hash)

        if node.body is None:
            try:
                node.body = self._fetch_body(block_hash)
            except ChainQueryError as e:
                logger.warning(f"[SETTLEMENT] {e.message}; block left unscanned")
                return []

        effects: list[Effect] = []
        complete = True
        for tx in select_included(ledger.pending(), node.body):
            try:
                is_valid = self._query("is_tx_valid", block_hash, tx)
                is_successful = (
                    self._query("is_tx_successful", block_hash, tx)
                    if is_valid
                    else None
                )
            except ChainQueryError as e:
                logger.warning(f"[SETTLEMENT] {e.message}; {tx!r} stays pending")
                complete = False
                continue

            outcome = decide_outcome(block_hash, is_valid, is_successful)
            blocks.record_settlement(block_hash, tx, outcome)
            ledger.mark_settled(tx, block_hash, outcome)
            effects.extend(decide_settled(tx, outcome))

        if complete:
            blocks.mark_scanned(block_hash)

        logger.debug(
            f"[SETTLEMENT] Block {block_hash} (parent {node.parent}, height "
            f"{node.height}): {len(effects)} transaction(s) settled"
        )
        return effects

    def _fetch_body(self, block_hash: BlockHash) -> frozenset:
        try:
            return frozenset(self.chain.get_body(block_hash))
        except Exception as e:
            raise ChainQueryError("get_body", block_hash, e) from e

    def _query(self, method: str, block_hash: BlockHash, *args: Any):
        try:
            return getattr(self.chain, method)(block_hash, *args)
        except Exception as e:
            raise ChainQueryError(method, block_hash, e) from e
