"""Inbound chain-notification events.

The source delivers plain mappings tagged by ``type``:

    {"type": "newBlock", "blockHash": "0x..", "parent": "0x.."}
    {"type": "newTransaction", "value": <opaque tx>}
    {"type": "finalized", "blockHash": "0x.."}

``parse_event`` turns them into the dataclasses below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from tracker.lifecycle.errors import InvalidEventError
from tracker.lifecycle.types import BlockHash, Transaction


@dataclass(frozen=True)
class NewBlockEvent:
    block_hash: BlockHash
    parent: BlockHash


@dataclass(frozen=True)
class NewTransactionEvent:
    value: Transaction


@dataclass(frozen=True)
class FinalizedEvent:
    block_hash: BlockHash


IncomingEvent = Union[NewBlockEvent, NewTransactionEvent, FinalizedEvent]


def _require(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    raise InvalidEventError(
        f"Event '{raw.get('type')}' is missing field '{keys[0]}'", event=dict(raw)
    )


def parse_event(raw: Mapping[str, Any] | IncomingEvent) -> IncomingEvent:
    """Decode a raw event mapping. Already-decoded events pass through."""
    if isinstance(raw, (NewBlockEvent, NewTransactionEvent, FinalizedEvent)):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidEventError(
            f"Expected an event mapping, got {type(raw).__name__}"
        )

    event_type = raw.get("type")
    if event_type == "newBlock":
        return NewBlockEvent(
            block_hash=_require(raw, "blockHash"),
            parent=_require(raw, "parent", "parentHash"),
        )
    elif event_type == "newTransaction":
        return NewTransactionEvent(value=_require(raw, "value"))
    elif event_type == "finalized":
        return FinalizedEvent(block_hash=_require(raw, "blockHash"))

    raise InvalidEventError(f"Unknown event type: {event_type}", event=dict(raw))
