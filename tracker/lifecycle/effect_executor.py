from __future__ import annotations

from tracker.lifecycle.effects import (
    Effect,
    TxDoneEffect,
    TxSettledEffect,
    UnpinEffect,
)
from tracker.lifecycle.interfaces import ChainAPI, OutputAPI


class EffectExecutor:
    """Executes a list of Effect objects against the tracker's collaborators.

    Notification effects map to OutputAPI callbacks, UnpinEffect maps to
    ChainAPI.unpin. Effects run strictly in list order.
    """

    def __init__(self, output: OutputAPI, chain: ChainAPI):
        self.output = output
        self.chain = chain

    def execute(self, effects: list[Effect]) -> None:
        for effect in effects:
            self._execute_one(effect)

    def _execute_one(self, effect: Effect) -> None:
        if isinstance(effect, TxSettledEffect):
            self.output.on_tx_settled(effect.tx, effect.outcome)

        elif isinstance(effect, TxDoneEffect):
            self.output.on_tx_done(effect.tx, effect.outcome)

        elif isinstance(effect, UnpinEffect):
            self.chain.unpin(list(effect.block_hashes))

        else:
            raise TypeError(f"Unknown effect type: {type(effect).__name__}")
