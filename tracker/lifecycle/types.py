from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable

BlockHash = str
Transaction = Hashable


class OutcomeType(Enum):
    INVALID = "invalid"
    VALID = "valid"


class TransactionStatus(Enum):
    PENDING = "PENDING"
    SETTLED = "SETTLED"
    DONE = "DONE"


@dataclass(frozen=True)
class Outcome:
    """Settlement outcome of a transaction within a specific block.

    Attributes:
        block_hash: Hash of the block the transaction settled in.
        type: INVALID when the transaction failed the validity check,
              VALID otherwise.
        successful: Execution result. Only meaningful for VALID outcomes,
                    always None for INVALID ones.
    """

    block_hash: BlockHash
    type: OutcomeType
    successful: bool | None = None

    @classmethod
    def invalid(cls, block_hash: BlockHash) -> "Outcome":
        return cls(block_hash=block_hash, type=OutcomeType.INVALID)

    @classmethod
    def valid(cls, block_hash: BlockHash, successful: bool) -> "Outcome":
        return cls(
            block_hash=block_hash, type=OutcomeType.VALID, successful=successful
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"blockHash": self.block_hash, "type": self.type.value}
        if self.type is OutcomeType.VALID:
            data["successful"] = self.successful
        return data
