from datetime import date, datetime

import pytest

from petz_py.models import Pet, PetStatus, Pedigree, PedigreeEntry, PetLink


def test_pet_dict_roundtrip_keeps_dates_and_status():
    p = Pet(
        id=5,
        show_name="Spotty Dot",
        registration_date=date(2023, 1, 2),
        status=PetStatus.PENDING_REGISTRATION,
        created_date=datetime(2023, 1, 2, 10, 30),
        sire_id=1,
        dam_id=2,
    )
    d = p.to_dict()
    assert d["registration_date"] == "2023-01-02"
    assert d["status"] == "PendingRegistration"
    assert Pet.from_dict(d) == p


def test_pet_status_parse():
    assert PetStatus.parse(None) is PetStatus.REGISTERED
    assert PetStatus.parse("pendingregistration") is PetStatus.PENDING_REGISTRATION
    assert PetStatus.parse("PENDING_REGISTRATION") is PetStatus.PENDING_REGISTRATION
    assert PetStatus.parse(PetStatus.REGISTERED) is PetStatus.REGISTERED
    with pytest.raises(ValueError):
        PetStatus.parse("Deleted")


def test_pet_is_pending():
    assert Pet(status=PetStatus.PENDING_REGISTRATION).is_pending
    assert not Pet().is_pending


def test_projections_expose_minimal_fields():
    p = Pet(id=9, show_name="Nine", pedigree_number="N-9", sex="Male", registrar_id=4, added_by=4)
    assert PedigreeEntry.from_pet(p).to_dict() == {"id": 9, "pedigree_number": "N-9", "show_name": "Nine"}
    assert PetLink.from_pet(p).to_dict() == {"id": 9, "show_name": "Nine", "sex": "Male"}


def test_pedigree_to_dict_keeps_null_slots():
    ped = Pedigree(entries=[[PedigreeEntry(id=1, show_name="S"), None]])
    assert ped.to_dict() == {"entries": [[{"id": 1, "pedigree_number": None, "show_name": "S"}, None]]}
