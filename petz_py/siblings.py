"""Sibling resolution from the offspring of a pet's dam and sire.

The sibling list is the union by id of the dam's and the sire's offspring,
with the pet itself removed. Dam-side siblings keep their order and come
first; sire-side siblings not already listed follow. A sibling found on both
sides is a full sibling, otherwise a half sibling.
"""
from __future__ import annotations
from typing import Iterable, List, Set

from .models import PetLink, SiblingLink


def compute_siblings(root_id: int, dam_offspring: Iterable[PetLink], sire_offspring: Iterable[PetLink]) -> List[SiblingLink]:
    dam_side = [o for o in dam_offspring if o.id != root_id]
    sire_side = [o for o in sire_offspring if o.id != root_id]
    dam_ids: Set[int] = {o.id for o in dam_side}
    sire_ids: Set[int] = {o.id for o in sire_side}

    siblings: List[SiblingLink] = []
    seen: Set[int] = set()
    for o in dam_side + sire_side:
        if o.id in seen:
            continue
        seen.add(o.id)
        siblings.append(
            SiblingLink(id=o.id, show_name=o.show_name, sex=o.sex, full=o.id in dam_ids and o.id in sire_ids)
        )
    return siblings
