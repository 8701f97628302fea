from __future__ import annotations

from loguru import logger

from tracker.lifecycle.decisions import decide_done, decide_unpin
from tracker.lifecycle.events import FinalizedEvent
from tracker.lifecycle.state import TrackerState
from tracker.lifecycle.transition import TransitionResult


class FinalizationEngine:
    """Completes transactions along newly finalized chains and prunes the block graph.

    The source does not announce every finalized block, so the whole chain
    between the previous cursor and the announced block is walked.
    """

    def __init__(self, state: TrackerState, unpin_enabled: bool = True):
        self.state = state
        self.unpin_enabled = unpin_enabled
        self._reported_unreachable_cursor = False

    def on_finalized(self, event: FinalizedEvent) -> TransitionResult:
        blocks = self.state.blocks
        ledger = self.state.ledger
        previous = self.state.cursor

        chain = blocks.chain_since(previous, event.block_hash)
        if not chain and previous is not None and previous not in blocks:
            chain = self._walk_past_unreachable_cursor(previous, event.block_hash)
        if not chain:
            logger.debug(
                f"[FINALIZATION] Nothing new to finalize at {event.block_hash} "
                f"(cursor {previous})"
            )
            return TransitionResult(cursor=previous)

        settled_by_block = {
            block_hash: ledger.settled_in(block_hash) for block_hash in chain
        }
        effects = decide_done(chain, settled_by_block)
        done_count = len(effects)
        for effect in effects:
            ledger.mark_done(effect.tx)

        self.state.cursor = event.block_hash

        height = blocks.get(event.block_hash).height
        obsolete = blocks.fork_set(event.block_hash)
        released = blocks.release(obsolete)
        for node in released:
            for tx in node.settlements:
                if ledger.forget(tx):
                    logger.debug(
                        f"[FINALIZATION] {tx!r} settled in pruned block {node.hash}, "
                        "dropping"
                    )
        effects.extend(decide_unpin(obsolete, self.unpin_enabled))

        logger.info(
            f"[FINALIZATION] Finalized {event.block_hash} (height {height}): "
            f"{len(chain)} block(s), "
            f"{done_count} transaction(s) done, {len(released)} block(s) released"
        )
        return TransitionResult(
            effects=effects,
            cursor=event.block_hash,
            released=tuple(node.hash for node in released),
        )

    def _walk_past_unreachable_cursor(self, cursor, block_hash) -> list:
        # Cursors set by a finalization stay retained; only a seeded cursor can be missing.
        if block_hash not in self.state.blocks:
            return []
        if not self._reported_unreachable_cursor:
            logger.error(
                f"[FINALIZATION] Cursor {cursor} is not reachable from any announced "
                "block; finalizing from the oldest retained ancestor instead"
            )
            self._reported_unreachable_cursor = True
        return self.state.blocks.chain_since(None, block_hash)
