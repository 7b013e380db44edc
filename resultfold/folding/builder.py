"""Rebuild folded result hierarchies from flat result lists.

A top result arrives with ``child_results`` holding a flat list of related
records. Each record may point to another record through ``parent_result``.
Folding turns that list into a forest:

* records whose parent is the top result become ``top.attachments``;
* records whose parent is another record of the group become attachments of
  that record, at any depth;
* records without a parent inside the group become ``top.child_results``
  (separate documents of the same group, e.g. other messages of a thread).

Parents are resolved by ``unique_id`` rather than by object identity, so a
parent delivered as a separate (deserialized) instance still links up.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from resultfold.core.models import ResultRecord

logger = logging.getLogger(__name__)

GetResult = Callable[[ResultRecord], ResultRecord]


def build_forest(top: ResultRecord) -> ResultRecord:
    """Fold ``top.child_results`` into attachments and root siblings.

    Mutates and returns ``top``. Within every sequence, members are ordered by
    the earliest flat-list position found in their subtree. Duplicate
    ``unique_id`` values keep the first occurrence. Unresolvable parents
    degrade the record to a root sibling instead of failing.
    """

    flat = list(top.child_results)
    top.attachments = []
    top.child_results = []

    index: Dict[str, ResultRecord] = {top.unique_id: top}
    positions: Dict[str, int] = {}
    claims: Dict[str, List[str]] = {}

    for position, record in enumerate(flat):
        kept = index.get(record.unique_id)
        if kept is None:
            index[record.unique_id] = record
            positions[record.unique_id] = position
            claims[record.unique_id] = []
        elif kept is top:
            logger.debug("Dropping occurrence of top result %s from its own group", top.unique_id)
            continue
        else:
            logger.debug("Dropping duplicate result %s at position %d", record.unique_id, position)

        parent_id = _parent_id(record)
        if parent_id is not None:
            claims[record.unique_id].append(parent_id)

    children: Dict[str, List[ResultRecord]] = {}
    roots: List[ResultRecord] = []
    for unique_id in positions:
        parent_id = _resolve_parent(unique_id, claims[unique_id], index)
        if parent_id is None:
            roots.append(index[unique_id])
        else:
            children.setdefault(parent_id, []).append(index[unique_id])

    _assemble(top, children, positions)

    ordered_roots = sorted(roots, key=lambda root: _assemble(root, children, positions))
    top.child_results = ordered_roots

    placed = len(flatten_forest(top))
    if placed != len(positions):
        logger.debug(
            "Left %d result(s) of %s out of the forest: cyclic parent chain",
            len(positions) - placed,
            top.unique_id,
        )
    return top


def flatten_forest(top: ResultRecord) -> List[ResultRecord]:
    """Return every record below ``top`` in pre-order.

    Attachments come first, then child results, each followed by its own
    attachments. Folding the returned list again reproduces the same forest.
    """

    flat: List[ResultRecord] = []

    def visit(record: ResultRecord) -> None:
        flat.append(record)
        for attachment in record.attachments:
            visit(attachment)

    for attachment in top.attachments:
        visit(attachment)
    for child in top.child_results:
        visit(child)
    return flat


def promote_parent(top: ResultRecord) -> ResultRecord:
    """Make the parent of an attachment the top of its group.

    When a query matches an attachment, the group is anchored on the document
    that owns it: the parent becomes the top result and the matched record
    becomes one of its attachments.
    """

    parent = top.parent_result
    if parent is None or parent.unique_id == top.unique_id:
        return top

    parent.child_results = [top, *top.child_results]
    top.child_results = []
    parent.total_number_of_child_results = max(
        parent.total_number_of_child_results, top.total_number_of_child_results
    )
    logger.debug("Promoted parent %s above attachment %s", parent.unique_id, top.unique_id)
    return parent


def fold_result(top: ResultRecord) -> ResultRecord:
    """Default folding of a top result: promote its parent, then build the forest."""

    return build_forest(promote_parent(top))


def _parent_id(record: ResultRecord) -> Optional[str]:
    if record.parent_result is None:
        return None
    return record.parent_result.unique_id


def _resolve_parent(
    unique_id: str, claimed: List[str], index: Dict[str, ResultRecord]
) -> Optional[str]:
    # The first occurrence's link wins; later duplicates only fill in a link it lacks.
    for parent_id in claimed:
        if parent_id != unique_id and parent_id in index:
            return parent_id
    if claimed:
        logger.debug("Parent of %s is not part of the group; folding it as a root", unique_id)
    return None


def _assemble(
    record: ResultRecord,
    children: Dict[str, List[ResultRecord]],
    positions: Dict[str, int],
) -> int:
    """Attach ``record``'s children recursively and return its subtree's first position."""

    keyed = [(_assemble(child, children, positions), child) for child in children.get(record.unique_id, [])]
    keyed.sort(key=lambda item: item[0])

    record.attachments = [child for _, child in keyed]
    for attachment in record.attachments:
        attachment.parent_result = record

    first = positions.get(record.unique_id, -1)
    if keyed:
        first = min(first, keyed[0][0]) if first >= 0 else keyed[0][0]
    return first


__all__ = ["GetResult", "build_forest", "flatten_forest", "fold_result", "promote_parent"]
