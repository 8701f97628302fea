"""
Event reducer tying the ledger, block graph and both engines together.

    tracker = TransactionTracker(chain_api, output_api)
    for event in source:
        tracker(event)

Events are handled one at a time and to completion; every callback an event
triggers has been invoked by the time ``handle`` returns.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Optional

from loguru import logger

from tracker.config.tracker_config import TrackerConfig
from tracker.lifecycle.effect_executor import EffectExecutor
from tracker.lifecycle.events import (
    FinalizedEvent,
    IncomingEvent,
    NewBlockEvent,
    NewTransactionEvent,
    parse_event,
)
from tracker.lifecycle.finalization import FinalizationEngine
from tracker.lifecycle.interfaces import ChainAPI, OutputAPI
from tracker.lifecycle.ledger import TransactionLedger
from tracker.lifecycle.settlement import SettlementEngine
from tracker.lifecycle.state import TrackerState
from tracker.lifecycle.transition import TransitionResult


class TransactionTracker:
    def __init__(
        self,
        chain: ChainAPI,
        output: OutputAPI,
        unpin_enabled: Optional[bool] = None,
        initial_finalized: Optional[str] = None,
    ):
        """
        Args:
            chain: Source query API (get_body, is_tx_valid, is_tx_successful, unpin).
            output: Receiver of on_tx_settled / on_tx_done.
            unpin_enabled: Forward obsolete blocks to ``chain.unpin``. Defaults
                           to TRACKER_UNPIN_ENABLED.
            initial_finalized: Seed for the finalization cursor. Defaults to
                               TRACKER_INITIAL_FINALIZED.
        """
        if unpin_enabled is None:
            unpin_enabled = TrackerConfig.is_unpin_enabled()
        if initial_finalized is None:
            initial_finalized = TrackerConfig.get_initial_finalized()

        self.state = TrackerState(
            ledger=TransactionLedger(
                retired_capacity=TrackerConfig.get_retired_capacity()
            ),
            cursor=initial_finalized,
        )
        self.settlement = SettlementEngine(self.state, chain)
        self.finalization = FinalizationEngine(self.state, unpin_enabled=unpin_enabled)
        self.executor = EffectExecutor(output, chain)

    @property
    def cursor(self) -> Optional[str]:
        return self.state.cursor

    def handle(self, event: Mapping[str, Any] | IncomingEvent) -> TransitionResult:
        """Apply one event and run the effects it produces.

        Raises:
            InvalidEventError: ``event`` is a mapping that cannot be decoded.
        """
        event = parse_event(event)

        if isinstance(event, NewTransactionEvent):
            self.state.ledger.record(event.value)
            result = TransitionResult(cursor=self.state.cursor)
        elif isinstance(event, NewBlockEvent):
            result = TransitionResult(
                effects=self.settlement.on_new_block(event), cursor=self.state.cursor
            )
        elif isinstance(event, FinalizedEvent):
            # Blocks whose scan failed earlier may be on the finalized chain.
            retried = self.settlement.scan_unscanned()
            result = self.finalization.on_finalized(event)
            if retried:
                result = replace(result, effects=retried + result.effects)
        else:
            raise TypeError(f"Unknown event type: {type(event).__name__}")

        logger.trace(
            f"[TRACKER] {type(event).__name__} -> {len(result.effects)} effect(s), "
            f"{len(self.state.ledger)} tracked tx, {len(self.state.blocks)} retained block(s)"
        )
        self.executor.execute(result.effects)
        return result

    __call__ = handle
