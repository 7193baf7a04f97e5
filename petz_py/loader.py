"""JSON dump import into a `Storage`.

The dump is a single JSON object with optional lists ``members``, ``breeds``,
``affixes`` and ``pets``. Each element uses the field names of the matching
model's ``to_dict``. Ids are kept as given so sire/dam references inside the
dump stay valid, e.g.::

    {
      "members": [{"id": 1, "name": "Ann"}],
      "breeds": [{"id": 1, "name": "Dalmatian"}],
      "pets": [
        {"id": 10, "show_name": "Old Spot", "sex": "Male"},
        {"id": 11, "show_name": "Pepper", "sex": "Female"},
        {"id": 12, "show_name": "Spot Junior", "sire_id": 10, "dam_id": 11}
      ]
    }
"""
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict
import json
import logging
import sqlite3

from .models import Affix, Breed, Member, Pet
from .storage import Storage


def load_dump(data: Dict[str, Any], storage: Storage) -> Dict[str, int]:
    """Insert the records of an already-parsed dump. Returns counts per kind.

    Every record is parsed before anything is written, and the inserts run in
    a single transaction: a malformed dump leaves the storage untouched.
    """
    if not isinstance(data, dict):
        raise ValueError("pet dump must be a JSON object")

    members = [Member.from_dict(d) for d in data.get("members", [])]
    breeds = [Breed.from_dict(d) for d in data.get("breeds", [])]
    affixes = [Affix.from_dict(d) for d in data.get("affixes", [])]
    pets = [Pet.from_dict(d) for d in data.get("pets", [])]

    known = {p.id for p in pets if p.id is not None}
    for p in pets:
        for ref in (p.sire_id, p.dam_id):
            if ref is not None and ref not in known and storage.get_pet(ref) is None:
                # stored anyway; the pedigree shows an unknown ancestor
                logging.warning("Pet %s references missing parent %s", p.id, ref)

    try:
        storage.add_all(members=members, breeds=breeds, affixes=affixes, pets=pets)
    except (sqlite3.IntegrityError, OverflowError) as e:
        raise ValueError(f"pet dump rejected: {e}") from e

    counts = {"members": len(members), "breeds": len(breeds), "affixes": len(affixes), "pets": len(pets)}
    logging.info("Loaded dump: %s", counts)
    return counts


def load_file(file_path: str | Path, storage: Storage) -> Dict[str, int]:
    p = Path(file_path)
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    return load_dump(data, storage)
