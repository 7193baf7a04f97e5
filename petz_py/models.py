from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Dict, Any


class PetStatus(str, Enum):
    REGISTERED = "Registered"
    PENDING_REGISTRATION = "PendingRegistration"

    @staticmethod
    def parse(value: Optional[str]) -> "PetStatus":
        if not value:
            return PetStatus.REGISTERED
        if isinstance(value, PetStatus):
            return value
        for st in PetStatus:
            if st.value.lower() == str(value).lower() or st.name.lower() == str(value).lower():
                return st
        raise ValueError(f"Unknown pet status: {value!r}")


def _date_to_iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def _date_from_iso(s: Any) -> Optional[date]:
    if not s:
        return None
    if isinstance(s, date):
        return s
    return date.fromisoformat(str(s)[:10])


def _datetime_from_iso(s: Any) -> Optional[datetime]:
    if not s:
        return None
    if isinstance(s, datetime):
        return s
    return datetime.fromisoformat(str(s))


@dataclass
class Member:
    id: Optional[int] = None
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Member":
        return Member(id=d.get("id"), name=d.get("name", ""))


@dataclass
class Breed:
    id: Optional[int] = None
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Breed":
        return Breed(id=d.get("id"), name=d.get("name", ""))


@dataclass
class Affix:
    id: Optional[int] = None
    name: str = ""
    owner_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Affix":
        return Affix(id=d.get("id"), name=d.get("name", ""), owner_id=d.get("owner_id"))


@dataclass
class Pet:
    id: Optional[int] = None
    show_name: str = ""
    partial_show_name: str = ""
    call_name: str = ""
    pedigree_number: Optional[str] = None
    registration_date: Optional[date] = None
    registrar_id: Optional[int] = None
    age: Optional[int] = None
    # sex stored as string everywhere: 'Male', 'Female' or None
    sex: Optional[str] = None
    game_version: Optional[str] = None
    status: PetStatus = PetStatus.REGISTERED
    sire_id: Optional[int] = None
    dam_id: Optional[int] = None
    affix_id: Optional[int] = None
    breed_id: Optional[int] = None
    owner_id: Optional[int] = None
    breeder_id: Optional[int] = None
    created_date: Optional[datetime] = None
    added_by: Optional[int] = None
    last_modified_date: Optional[datetime] = None
    modified_by: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self.status == PetStatus.PENDING_REGISTRATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "show_name": self.show_name,
            "partial_show_name": self.partial_show_name,
            "call_name": self.call_name,
            "pedigree_number": self.pedigree_number,
            "registration_date": _date_to_iso(self.registration_date),
            "registrar_id": self.registrar_id,
            "age": self.age,
            "sex": self.sex,
            "game_version": self.game_version,
            "status": self.status.value,
            "sire_id": self.sire_id,
            "dam_id": self.dam_id,
            "affix_id": self.affix_id,
            "breed_id": self.breed_id,
            "owner_id": self.owner_id,
            "breeder_id": self.breeder_id,
            "created_date": self.created_date.isoformat() if self.created_date else None,
            "added_by": self.added_by,
            "last_modified_date": self.last_modified_date.isoformat() if self.last_modified_date else None,
            "modified_by": self.modified_by,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Pet":
        return Pet(
            id=d.get("id"),
            show_name=d.get("show_name") or "",
            partial_show_name=d.get("partial_show_name") or "",
            call_name=d.get("call_name") or "",
            pedigree_number=d.get("pedigree_number"),
            registration_date=_date_from_iso(d.get("registration_date")),
            registrar_id=d.get("registrar_id"),
            age=d.get("age"),
            sex=d.get("sex"),
            game_version=d.get("game_version"),
            status=PetStatus.parse(d.get("status")),
            sire_id=d.get("sire_id"),
            dam_id=d.get("dam_id"),
            affix_id=d.get("affix_id"),
            breed_id=d.get("breed_id"),
            owner_id=d.get("owner_id"),
            breeder_id=d.get("breeder_id"),
            created_date=_datetime_from_iso(d.get("created_date")),
            added_by=d.get("added_by"),
            last_modified_date=_datetime_from_iso(d.get("last_modified_date")),
            modified_by=d.get("modified_by"),
        )


@dataclass
class AncestorRecord:
    """A pet reached by the ancestor walk, with the number of parent edges
    followed from the root along the path that found it."""

    pet: Pet
    depth: int

    def to_dict(self) -> Dict[str, Any]:
        d = self.pet.to_dict()
        d["depth"] = self.depth
        return d


@dataclass
class PedigreeEntry:
    id: int
    pedigree_number: Optional[str] = None
    show_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_pet(pet: Pet) -> "PedigreeEntry":
        return PedigreeEntry(id=pet.id, pedigree_number=pet.pedigree_number, show_name=pet.show_name)


@dataclass
class Pedigree:
    # entries[i] is generation i (parents are generation 0) with 2**(i+1) slots
    entries: List[List[Optional[PedigreeEntry]]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"entries": [[e.to_dict() if e else None for e in gen] for gen in self.entries]}


@dataclass
class PetLink:
    id: int
    show_name: str = ""
    sex: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_pet(pet: Pet) -> "PetLink":
        return PetLink(id=pet.id, show_name=pet.show_name, sex=pet.sex)


@dataclass
class SiblingLink:
    id: int
    show_name: str = ""
    sex: Optional[str] = None
    full: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PetDetails:
    """Everything the profile needs about one pet, fetched in one go."""

    pet: Pet
    affix_name: Optional[str] = None
    breed_name: Optional[str] = None
    owner_name: Optional[str] = None
    breeder_name: Optional[str] = None
    offspring: List[PetLink] = field(default_factory=list)
    dam_offspring: List[PetLink] = field(default_factory=list)
    sire_offspring: List[PetLink] = field(default_factory=list)


@dataclass
class PetProfile:
    id: int
    show_name: str
    affix_id: Optional[int]
    affix_name: Optional[str]
    pedigree_number: Optional[str]
    registration_date: Optional[date]
    age: Optional[int]
    sex: Optional[str]
    game_version: Optional[str]
    breed_id: Optional[int]
    breed_name: Optional[str]
    owner_id: Optional[int]
    owner_name: Optional[str]
    breeder_id: Optional[int]
    breeder_name: Optional[str]
    offspring: List[PetLink] = field(default_factory=list)
    siblings: List[SiblingLink] = field(default_factory=list)
    pedigree: Optional[Pedigree] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "show_name": self.show_name,
            "affix_id": self.affix_id,
            "affix_name": self.affix_name,
            "pedigree_number": self.pedigree_number,
            "registration_date": _date_to_iso(self.registration_date),
            "age": self.age,
            "sex": self.sex,
            "game_version": self.game_version,
            "breed_id": self.breed_id,
            "breed_name": self.breed_name,
            "owner_id": self.owner_id,
            "owner_name": self.owner_name,
            "breeder_id": self.breeder_id,
            "breeder_name": self.breeder_name,
            "offspring": [o.to_dict() for o in self.offspring],
            "siblings": [s.to_dict() for s in self.siblings],
            "pedigree": self.pedigree.to_dict() if self.pedigree else None,
        }
