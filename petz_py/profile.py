"""Pet profile assembly.

API:
    assemble_profile(storage, pet_id) -> Optional[PetProfile]

The profile combines the pet's own display fields, the names of its affix,
breed, owner and breeder, its offspring, its siblings and a pedigree of
PROFILE_GENERATIONS generations. Pets pending registration have no profile.
"""
from __future__ import annotations
from typing import Optional
import logging

from .models import PetProfile
from .pedigree import get_pedigree
from .siblings import compute_siblings

# fixed for the profile view; the standalone pedigree query takes any depth
PROFILE_GENERATIONS = 3


def assemble_profile(storage, pet_id: int) -> Optional[PetProfile]:
    with storage.snapshot():
        details = storage.pet_details(pet_id)
        if details is None:
            logging.info("Profile requested for unknown pet %s", pet_id)
            return None
        pet = details.pet
        if pet.is_pending:
            logging.info("Profile requested for pet %s pending registration", pet_id)
            return None
        pedigree = get_pedigree(storage, pet.id, PROFILE_GENERATIONS)

    siblings = compute_siblings(pet.id, details.dam_offspring, details.sire_offspring)

    return PetProfile(
        id=pet.id,
        show_name=pet.show_name,
        affix_id=pet.affix_id,
        affix_name=details.affix_name,
        pedigree_number=pet.pedigree_number,
        registration_date=pet.registration_date,
        age=pet.age,
        sex=pet.sex,
        game_version=pet.game_version,
        breed_id=pet.breed_id,
        breed_name=details.breed_name,
        owner_id=pet.owner_id,
        owner_name=details.owner_name,
        breeder_id=pet.breeder_id,
        breeder_name=details.breeder_name,
        offspring=list(details.offspring),
        siblings=siblings,
        pedigree=pedigree,
    )

