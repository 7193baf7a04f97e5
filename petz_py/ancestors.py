"""Bounded ancestor walk over sire/dam references.

API:
    fetch_ancestors(storage, root_id, max_generations) -> List[AncestorRecord]

The walk is breadth-first and path-wise: every record found at depth d
contributes its sire and then its dam at depth d+1, for d up to
``max_generations - 1``. Nothing is deduplicated by identity, so a pet that
is reachable along two paths (inbreeding) yields two records, one per path.
Because the stopping condition is the generation bound and not "no new
pets", cyclic parentage data still terminates after at most
``2**(max_generations + 1) - 1`` records.

Each level is loaded with a single batched lookup (``Storage.get_pets``) and
the whole walk runs inside one storage snapshot.
"""
from __future__ import annotations
from typing import List
import logging

from .models import AncestorRecord


class InvalidGenerations(ValueError):
    """Raised when a generation count is out of the accepted range."""


def fetch_ancestors(storage, root_id: int, max_generations: int) -> List[AncestorRecord]:
    """Return the root (depth 0) and its ancestors up to `max_generations`.

    An empty list means the root does not exist. References to pets that are
    missing from storage are skipped.
    """
    if max_generations < 0:
        raise InvalidGenerations(f"max_generations must be >= 0, got {max_generations}")

    with storage.snapshot():
        root = storage.get_pets([root_id]).get(root_id)
        if root is None:
            return []

        result: List[AncestorRecord] = [AncestorRecord(pet=root, depth=0)]
        level: List[AncestorRecord] = result[:]
        for depth in range(1, max_generations + 1):
            parent_ids = set()
            for rec in level:
                parent_ids.add(rec.pet.sire_id)
                parent_ids.add(rec.pet.dam_id)
            parent_ids.discard(None)
            if not parent_ids:
                break
            found = storage.get_pets(parent_ids)

            next_level: List[AncestorRecord] = []
            for rec in level:
                for pid in (rec.pet.sire_id, rec.pet.dam_id):
                    if pid is not None and pid in found:
                        next_level.append(AncestorRecord(pet=found[pid], depth=depth))
            result.extend(next_level)
            level = next_level

    logging.debug("fetch_ancestors(%s, %d): %d records", root_id, max_generations, len(result))
    return result
