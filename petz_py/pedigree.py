"""Pedigree (generation-indexed ancestry) reconstruction.

A pedigree is a list of generations. Generation 0 holds the root's
``[sire, dam]``; every later generation is built by walking the previous one
left to right and appending each slot's ``[sire, dam]``, so generation i
always has ``2**(i+1)`` slots. Slot k of generation i encodes a fixed path
from the root: reading the bits of k from the most significant, 0 means
"sire" and 1 means "dam". Unknown ancestors are ``None`` slots, and a
``None`` slot only has ``None`` parents.

API:
    build_pedigree(root_id, generations, ancestors) -> Optional[Pedigree]
    get_pedigree(storage, pet_id, generations) -> Optional[Pedigree]
    validate_generations(generations, limit) -> int
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional
import logging

from .ancestors import fetch_ancestors, InvalidGenerations
from .models import AncestorRecord, Pedigree, PedigreeEntry, Pet


def validate_generations(generations: int, limit: Optional[int] = None) -> int:
    """Check a caller-supplied generation count and return it.

    Raises InvalidGenerations when it is below 1 or above `limit`.
    """
    if generations < 1:
        raise InvalidGenerations(f"generations must be at least 1, got {generations}")
    if limit is not None and generations > limit:
        raise InvalidGenerations(f"generations must be at most {limit}, got {generations}")
    return generations


def build_pedigree(root_id: int, generations: int, ancestors: Iterable[AncestorRecord]) -> Optional[Pedigree]:
    """Rebuild the positional pedigree of `root_id` from a flat ancestor set.

    Returns None when the root is not part of `ancestors`.
    """
    # identity lookup only; a pet appearing on several paths has the same data
    by_id: Dict[int, Pet] = {}
    for rec in ancestors:
        by_id.setdefault(rec.pet.id, rec.pet)

    root = by_id.get(root_id)
    if root is None:
        return None

    def parents(p: Optional[Pet]) -> List[Optional[Pet]]:
        if p is None:
            return [None, None]
        sire = by_id.get(p.sire_id) if p.sire_id is not None else None
        dam = by_id.get(p.dam_id) if p.dam_id is not None else None
        return [sire, dam]

    tree: List[List[Optional[Pet]]] = []
    for i in range(generations):
        if i == 0:
            tree.append(parents(root))
            continue
        gen: List[Optional[Pet]] = []
        for p in tree[i - 1]:
            gen.extend(parents(p))
        tree.append(gen)

    entries = [[PedigreeEntry.from_pet(p) if p is not None else None for p in gen] for gen in tree]
    return Pedigree(entries=entries)


def get_pedigree(storage, pet_id: int, generations: int) -> Optional[Pedigree]:
    """Fetch and build the pedigree of `pet_id` over `generations` generations.

    Only existence is checked here: a pet pending registration still has a
    pedigree. Returns None when the pet does not exist.
    """
    validate_generations(generations)
    ancestors = fetch_ancestors(storage, pet_id, generations)
    if not ancestors:
        logging.info("Pedigree requested for unknown pet %s", pet_id)
        return None
    return build_pedigree(pet_id, generations, ancestors)
