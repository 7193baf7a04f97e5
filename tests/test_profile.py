from datetime import date
from pathlib import Path

from petz_py.storage import Storage
from petz_py.models import Pet, PetStatus, Affix, Breed, Member
from petz_py.profile import assemble_profile, PROFILE_GENERATIONS


def _family(store: Storage):
    # Owner/breeder, a breed and an affix for the root pet
    store.add_member(Member(id=1, name="Alice"))
    store.add_member(Member(id=2, name="Bob"))
    store.add_breed(Breed(id=1, name="Dalmatian"))
    store.add_affix(Affix(id=1, name="Spotty", owner_id=2))

    store.add_pet(Pet(id=10, show_name="Big Sire", sex="Male"))
    store.add_pet(Pet(id=11, show_name="Good Dam", sex="Female"))
    store.add_pet(Pet(id=12, show_name="Other Dam", sex="Female"))
    store.add_pet(
        Pet(
            id=1,
            show_name="Spotty Root",
            pedigree_number="PBC-0001",
            registration_date=date(2024, 5, 1),
            age=3,
            sex="Female",
            game_version="Petz 5",
            sire_id=10,
            dam_id=11,
            affix_id=1,
            breed_id=1,
            owner_id=1,
            breeder_id=2,
        )
    )
    # full sibling, half sibling on the dam side, half sibling on the sire side
    store.add_pet(Pet(id=2, show_name="Full Sib", sex="Male", sire_id=10, dam_id=11))
    store.add_pet(Pet(id=3, show_name="Dam Half", sex="Female", dam_id=11))
    store.add_pet(Pet(id=4, show_name="Sire Half", sex="Male", sire_id=10, dam_id=12))
    # the root's own offspring
    store.add_pet(Pet(id=20, show_name="Pup", sex="Male", dam_id=1))


def test_profile_composition(tmp_path: Path):
    store = Storage(tmp_path / "store")
    _family(store)

    prof = assemble_profile(store, 1)
    assert prof is not None
    assert prof.show_name == "Spotty Root"
    assert prof.affix_name == "Spotty"
    assert prof.breed_name == "Dalmatian"
    assert prof.owner_name == "Alice"
    assert prof.breeder_name == "Bob"
    assert prof.registration_date == date(2024, 5, 1)
    assert [(o.id, o.show_name, o.sex) for o in prof.offspring] == [(20, "Pup", "Male")]
    assert [(s.id, s.full) for s in prof.siblings] == [(2, True), (3, False), (4, False)]


def test_profile_pedigree_has_fixed_depth(tmp_path: Path):
    store = Storage(tmp_path / "store")
    _family(store)

    prof = assemble_profile(store, 1)
    assert len(prof.pedigree.entries) == PROFILE_GENERATIONS == 3
    assert [e.id if e else None for e in prof.pedigree.entries[0]] == [10, 11]
    assert [len(g) for g in prof.pedigree.entries] == [2, 4, 8]


def test_profile_of_missing_pet(tmp_path: Path):
    store = Storage(tmp_path / "store")
    assert assemble_profile(store, 99) is None


def test_pending_pet_has_no_profile(tmp_path: Path):
    store = Storage(tmp_path / "store")
    store.add_pet(Pet(id=5, show_name="Not Yet", status=PetStatus.PENDING_REGISTRATION))
    assert assemble_profile(store, 5) is None


def test_pending_pet_still_listed_as_parent_and_sibling(tmp_path: Path):
    store = Storage(tmp_path / "store")
    store.add_pet(Pet(id=10, show_name="Pending Sire", status=PetStatus.PENDING_REGISTRATION))
    store.add_pet(Pet(id=1, show_name="Root", sire_id=10))
    store.add_pet(Pet(id=2, show_name="Pending Sib", sire_id=10, status=PetStatus.PENDING_REGISTRATION))

    prof = assemble_profile(store, 1)
    assert prof.pedigree.entries[0][0].id == 10
    assert [s.id for s in prof.siblings] == [2]


def test_profile_without_related_names(tmp_path: Path):
    store = Storage(tmp_path / "store")
    store.add_pet(Pet(id=1, show_name="Stray"))
    prof = assemble_profile(store, 1)
    assert prof.affix_name is None
    assert prof.breed_name is None
    assert prof.owner_name is None
    assert prof.siblings == []
    assert prof.offspring == []
    d = prof.to_dict()
    assert d["registration_date"] is None
    assert d["pedigree"]["entries"][0] == [None, None]


def test_profile_is_idempotent(tmp_path: Path):
    store = Storage(tmp_path / "store")
    _family(store)
    assert assemble_profile(store, 1).to_dict() == assemble_profile(store, 1).to_dict()


def test_profile_of_id_beyond_sqlite_integer_range(tmp_path: Path):
    store = Storage(tmp_path / "store")
    _family(store)
    assert assemble_profile(store, 2**63) is None
    assert assemble_profile(store, -2**63 - 1) is None
