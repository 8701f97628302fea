from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from tracker.lifecycle.block_graph import BlockGraph
from tracker.lifecycle.ledger import TransactionLedger
from tracker.lifecycle.types import BlockHash


@dataclass
class TrackerState:
    """All mutable tracker state, owned by a single TransactionTracker."""

    ledger: TransactionLedger = field(default_factory=TransactionLedger)
    blocks: BlockGraph = field(default_factory=BlockGraph)
    cursor: Optional[BlockHash] = None
