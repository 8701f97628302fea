from __future__ import annotations

from dataclasses import dataclass, field

from tracker.lifecycle.effects import Effect
from tracker.lifecycle.types import BlockHash


@dataclass(frozen=True)
class TransitionResult:
    """Describes the outcome of handling one event as pure data.

    Attributes:
        effects: Ordered list of side effects to execute.
        cursor: Finalization cursor after the event was handled.
        released: Block hashes whose state was dropped by this event.
    """

    effects: list[Effect] = field(default_factory=list)
    cursor: BlockHash | None = None
    released: tuple[BlockHash, ...] = ()
