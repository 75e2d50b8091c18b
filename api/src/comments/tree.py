"""Reply-tree assembly.

Turns the flat comment list of one post into an ordered forest. Siblings
(and roots) are ordered accepted answer first, then by vote count, then
newest first. Nodes are held in an arena keyed by comment id and linked in a
single pass over the sorted list, so the order of every ``replies`` list
follows the overall sort.
"""

from collections.abc import Iterable, Iterator

import structlog

from .schemas import CommentNode


logger = structlog.get_logger(__name__)


def sort_key(node: CommentNode) -> tuple:
    """Sibling order key (used with ``reverse=True``)."""
    return (node.is_accepted_answer, node.vote_count, node.created_at)


class CommentTreeBuilder:
    """Builds reply forests from flat comment lists."""

    def build(self, comments: Iterable[CommentNode]) -> list[CommentNode]:
        """Assemble a forest from the comments of one post.

        Every input node appears exactly once in the output. A node whose
        parent is missing, is itself, or lies on a parent cycle becomes a
        root. Inputs are not mutated; the forest is made of copies.
        """
        ordered = sorted(comments, key=sort_key, reverse=True)

        arena: dict[int, CommentNode] = {}
        for comment in ordered:
            if comment.id in arena:
                logger.warning("duplicate_comment_skipped", comment_id=comment.id)
                continue
            arena[comment.id] = comment.model_copy(update={"replies": [], "depth": 0})

        parents = {node.id: node.parent_id for node in arena.values()}

        roots: list[CommentNode] = []
        for node in arena.values():
            parent_id = node.parent_id
            if parent_id is None:
                roots.append(node)
            elif parent_id not in arena:
                logger.warning(
                    "orphan_comment_promoted",
                    comment_id=node.id,
                    parent_id=parent_id,
                )
                roots.append(node)
            elif _on_cycle(node.id, parents):
                logger.warning(
                    "cyclic_comment_promoted",
                    comment_id=node.id,
                    parent_id=parent_id,
                )
                roots.append(node)
            else:
                arena[parent_id].replies.append(node)

        _assign_depths(roots)
        return roots


def _on_cycle(comment_id: int, parents: dict[int, int | None]) -> bool:
    """Whether following parent links from ``comment_id`` leads back to it."""
    seen: set[int] = set()
    current = parents.get(comment_id)
    while current is not None and current in parents:
        if current == comment_id:
            return True
        if current in seen:
            # Reaches a cycle that does not include this comment
            return False
        seen.add(current)
        current = parents[current]
    return False


def _assign_depths(roots: list[CommentNode]) -> None:
    stack = [(node, 0) for node in roots]
    while stack:
        node, depth = stack.pop()
        node.depth = depth
        stack.extend((reply, depth + 1) for reply in node.replies)


def iter_nodes(forest: list[CommentNode]) -> Iterator[CommentNode]:
    """Yield every node of a forest in display (pre-)order."""
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.replies))


def count_nodes(forest: list[CommentNode]) -> int:
    """Total number of nodes across all nesting levels."""
    return sum(1 for _ in iter_nodes(forest))
