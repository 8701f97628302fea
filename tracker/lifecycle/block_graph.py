from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from loguru import logger

from tracker.lifecycle.types import BlockHash, Outcome


@dataclass
class BlockNode:
    """A retained block and the settlements recorded in it."""

    hash: BlockHash
    parent: BlockHash
    height: int = 0
    scanned: bool = False
    body: Optional[frozenset] = None
    children: dict[BlockHash, None] = field(default_factory=dict)
    settlements: dict[Any, Outcome] = field(default_factory=dict)


class BlockGraph:
    """
    Explicit block tree of every block seen since the last finalization.

    Nodes are keyed by hash and linked both ways (parent hash, children). The
    tree is rooted at or below the finalization cursor; anything the source
    has not announced is treated as an implicit genesis ancestor.
    """

    def __init__(self):
        self._blocks: dict[BlockHash, BlockNode] = {}

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, block_hash: BlockHash) -> bool:
        return block_hash in self._blocks

    def __iter__(self):
        return iter(list(self._blocks))

    def get(self, block_hash: BlockHash) -> Optional[BlockNode]:
        return self._blocks.get(block_hash)

    def ensure_block(self, block_hash: BlockHash, parent: BlockHash) -> BlockNode:
        """Create the node on first sight; later sightings return it unchanged."""
        node = self._blocks.get(block_hash)
        if node is not None:
            if node.parent != parent:
                logger.warning(
                    f"[BLOCKS] Block {block_hash} re-announced with parent {parent}, "
                    f"keeping {node.parent}"
                )
            return node

        parent_node = self._blocks.get(parent)
        height = parent_node.height + 1 if parent_node is not None else 0
        node = BlockNode(hash=block_hash, parent=parent, height=height)
        self._blocks[block_hash] = node
        if parent_node is not None:
            parent_node.children[block_hash] = None
        return node

    def record_settlement(self, block_hash: BlockHash, tx: Any, outcome: Outcome):
        node = self._blocks.get(block_hash)
        if node is None:
            logger.warning(
                f"[BLOCKS] Settlement of {tx!r} recorded against unknown block {block_hash}"
            )
            return
        node.settlements[tx] = outcome

    def mark_scanned(self, block_hash: BlockHash) -> None:
        node = self._blocks.get(block_hash)
        if node is not None:
            node.scanned = True

    def unscanned(self) -> list[BlockHash]:
        """Retained blocks not fully scanned yet, in first-seen order."""
        return [h for h, node in self._blocks.items() if not node.scanned]

    def is_scanned(self, block_hash: BlockHash) -> bool:
        node = self._blocks.get(block_hash)
        return node is not None and node.scanned

    def chain_since(
        self, cursor: Optional[BlockHash], new_finalized: BlockHash
    ) -> list[BlockHash]:
        """Blocks from ``cursor`` (exclusive) to ``new_finalized`` (inclusive), oldest first.

        With no cursor the walk stops at the first parent that was never
        announced. Returns [] when ``cursor`` is not on the ancestor path.
        """
        if new_finalized == cursor or new_finalized not in self._blocks:
            return []

        path: list[BlockHash] = []
        current = new_finalized
        # One step per retained block, plus one to step off the tree.
        for _ in range(len(self._blocks) + 1):
            node = self._blocks.get(current)
            if node is None:
                break
            path.append(current)
            if node.parent == cursor:
                path.reverse()
                return path
            current = node.parent
        else:
            logger.warning(
                f"[BLOCKS] Parent cycle detected while walking back from {new_finalized}"
            )
            return []

        if cursor is None:
            path.reverse()
            return path

        logger.warning(
            f"[BLOCKS] Cursor {cursor} is not an ancestor of {new_finalized} "
            f"(walk stopped at unknown block {current})"
        )
        return []

    def descendants(self, block_hash: BlockHash) -> list[BlockHash]:
        """Retained descendants of ``block_hash``, breadth first."""
        node = self._blocks.get(block_hash)
        if node is None:
            return []
        found: list[BlockHash] = []
        frontier = list(node.children)
        while frontier:
            child = frontier.pop(0)
            child_node = self._blocks.get(child)
            if child_node is None:
                continue
            found.append(child)
            frontier.extend(child_node.children)
        return found

    def fork_set(self, new_cursor: BlockHash) -> list[BlockHash]:
        """Every retained block except ``new_cursor`` and its descendants.

        That is the processed chain, the previous cursor, and all sibling
        branches that lost to this finalization, in first-seen order.
        """
        keep = {new_cursor, *self.descendants(new_cursor)}
        return [block_hash for block_hash in self._blocks if block_hash not in keep]

    def release(self, block_hashes: Iterable[BlockHash]) -> list[BlockNode]:
        """Drop the given blocks and return the removed nodes."""
        released: list[BlockNode] = []
        for block_hash in block_hashes:
            node = self._blocks.pop(block_hash, None)
            if node is None:
                continue
            parent_node = self._blocks.get(node.parent)
            if parent_node is not None:
                parent_node.children.pop(block_hash, None)
            released.append(node)
        return released
