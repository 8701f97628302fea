from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tracker.lifecycle.types import BlockHash, Outcome


@dataclass(frozen=True)
class Effect:
    """Base class for all tracker side effects."""

    pass


# ── Notification Effects ───────────────────────────────────────────


@dataclass(frozen=True)
class TxSettledEffect(Effect):
    tx: Any
    outcome: Outcome


@dataclass(frozen=True)
class TxDoneEffect(Effect):
    tx: Any
    outcome: Outcome


# ── Source Effects ─────────────────────────────────────────────────


@dataclass(frozen=True)
class UnpinEffect(Effect):
    block_hashes: tuple[BlockHash, ...] = ()
