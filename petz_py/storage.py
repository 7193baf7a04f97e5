"""Storage layer backed by SQLite.

Pets, affixes, breeds and members live in normalized tables of an SQLite
database located at ``<root>/storage.db``. Unlike a lazily-navigated ORM,
every read here is an explicit query: callers ask for exactly the rows they
need (a batch of pets by id, the offspring of a pet, the full details bundle
for a profile) and nothing is fetched behind their back.

Reads that must see a consistent view across several queries (an ancestor
walk, a profile lookup) run inside :meth:`Storage.snapshot`.
"""
from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, List, Iterable, Iterator
import logging
import sqlite3
import threading

from .models import Pet, PetLink, PetDetails, Affix, Breed, Member


_PET_COLUMNS = (
    "id",
    "show_name",
    "partial_show_name",
    "call_name",
    "pedigree_number",
    "registration_date",
    "registrar_id",
    "age",
    "sex",
    "game_version",
    "status",
    "sire_id",
    "dam_id",
    "affix_id",
    "breed_id",
    "owner_id",
    "breeder_id",
    "created_date",
    "added_by",
    "last_modified_date",
    "modified_by",
)

_PET_SELECT = "SELECT " + ", ".join(_PET_COLUMNS) + " FROM pets"

# SQLite's default SQLITE_MAX_VARIABLE_NUMBER is 999 on older builds
_MAX_BATCH = 500

# ids outside SQLite's signed 64-bit INTEGER range can never be stored
_MIN_ID = -2**63
_MAX_ID = 2**63 - 1


def _row_to_pet(row: sqlite3.Row) -> Pet:
    return Pet.from_dict({k: row[k] for k in _PET_COLUMNS})


def _pet_to_params(pet: Pet) -> tuple:
    d = pet.to_dict()
    return tuple(d[k] for k in _PET_COLUMNS)


class Storage:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        # guards the shared connection; reentrant so snapshot() can wrap reads
        self._lock = threading.RLock()
        self._db_file = self.root / "storage.db"
        self._conn: Optional[sqlite3.Connection] = None
        self._connect()
        self._ensure_tables()

    def _connect(self) -> None:
        if self._conn is None:
            # uvicorn may run sync handlers in worker threads; access is
            # serialized through self._lock
            self._conn = sqlite3.connect(str(self._db_file), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row

    def _ensure_tables(self) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.executescript(
                """
                CREATE TABLE IF NOT EXISTS members(
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS breeds(
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS affixes(
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    owner_id INTEGER
                );
                CREATE TABLE IF NOT EXISTS pets(
                    id INTEGER PRIMARY KEY,
                    show_name TEXT,
                    partial_show_name TEXT,
                    call_name TEXT,
                    pedigree_number TEXT,
                    registration_date TEXT,
                    registrar_id INTEGER,
                    age INTEGER,
                    sex TEXT,
                    game_version TEXT,
                    status TEXT NOT NULL,
                    sire_id INTEGER,
                    dam_id INTEGER,
                    affix_id INTEGER,
                    breed_id INTEGER,
                    owner_id INTEGER,
                    breeder_id INTEGER,
                    created_date TEXT,
                    added_by INTEGER,
                    last_modified_date TEXT,
                    modified_by INTEGER
                );
                CREATE INDEX IF NOT EXISTS ix_pets_sire ON pets(sire_id);
                CREATE INDEX IF NOT EXISTS ix_pets_dam ON pets(dam_id);
                """
            )
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    @contextmanager
    def snapshot(self) -> Iterator["Storage"]:
        """Hold the connection and a read transaction for a group of queries.

        Nested calls join the outer transaction.
        """
        with self._lock:
            began = not self._conn.in_transaction
            if began:
                self._conn.execute("BEGIN")
            try:
                yield self
            finally:
                if began and self._conn.in_transaction:
                    self._conn.commit()

    def _insert_pet(self, pet: Pet) -> None:
        if pet.created_date is None:
            pet.created_date = datetime.now()
        placeholders = ", ".join("?" for _ in _PET_COLUMNS)
        cur = self._conn.execute(
            f"INSERT INTO pets({', '.join(_PET_COLUMNS)}) VALUES({placeholders})",
            _pet_to_params(pet),
        )
        pet.id = cur.lastrowid if pet.id is None else pet.id

    def _insert_named(self, table: str, obj) -> None:
        if table == "affixes":
            cur = self._conn.execute(
                "INSERT INTO affixes(id, name, owner_id) VALUES(?, ?, ?)", (obj.id, obj.name, obj.owner_id)
            )
        else:
            cur = self._conn.execute(f"INSERT INTO {table}(id, name) VALUES(?, ?)", (obj.id, obj.name))
        obj.id = cur.lastrowid if obj.id is None else obj.id

    # Pet operations
    def add_pet(self, pet: Pet) -> int:
        with self._lock:
            self._insert_pet(pet)
            self._conn.commit()
        logging.debug("Stored pet %s (%s)", pet.id, pet.show_name)
        return pet.id

    def update_pet(self, pet: Pet) -> None:
        pet.last_modified_date = datetime.now()
        assignments = ", ".join(f"{k} = ?" for k in _PET_COLUMNS[1:])
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                f"UPDATE pets SET {assignments} WHERE id = ?",
                _pet_to_params(pet)[1:] + (pet.id,),
            )
            if cur.rowcount == 0:
                self._conn.rollback()
                raise KeyError(f"Pet {pet.id} not found")
            self._conn.commit()

    def get_pet(self, pid: int) -> Optional[Pet]:
        if not _MIN_ID <= pid <= _MAX_ID:
            return None
        with self._lock:
            row = self._conn.execute(_PET_SELECT + " WHERE id = ?", (pid,)).fetchone()
        return _row_to_pet(row) if row else None

    def get_pets(self, ids: Iterable[int]) -> Dict[int, Pet]:
        """Return the pets whose id is in `ids`, keyed by id.

        Unknown ids are simply absent from the result.
        """
        wanted = sorted({i for i in ids if i is not None and _MIN_ID <= i <= _MAX_ID})
        found: Dict[int, Pet] = {}
        with self._lock:
            for start in range(0, len(wanted), _MAX_BATCH):
                chunk = wanted[start:start + _MAX_BATCH]
                placeholders = ", ".join("?" for _ in chunk)
                rows = self._conn.execute(_PET_SELECT + f" WHERE id IN ({placeholders})", chunk).fetchall()
                for row in rows:
                    p = _row_to_pet(row)
                    found[p.id] = p
        return found

    def list_pets(self) -> List[Pet]:
        with self._lock:
            rows = self._conn.execute(_PET_SELECT + " ORDER BY id").fetchall()
        return [_row_to_pet(r) for r in rows]

    def offspring_of(self, pid: Optional[int]) -> List[Pet]:
        """Pets that have `pid` recorded as their sire or dam, ordered by id."""
        if pid is None:
            return []
        with self._lock:
            rows = self._conn.execute(
                _PET_SELECT + " WHERE sire_id = ? OR dam_id = ? ORDER BY id", (pid, pid)
            ).fetchall()
        return [_row_to_pet(r) for r in rows]

    # Members, breeds and affixes: only what the profile needs to show names
    def add_member(self, member: Member) -> int:
        with self._lock:
            self._insert_named("members", member)
            self._conn.commit()
        return member.id

    def add_breed(self, breed: Breed) -> int:
        with self._lock:
            self._insert_named("breeds", breed)
            self._conn.commit()
        return breed.id

    def add_affix(self, affix: Affix) -> int:
        with self._lock:
            self._insert_named("affixes", affix)
            self._conn.commit()
        return affix.id

    def add_all(
        self,
        members: Iterable[Member] = (),
        breeds: Iterable[Breed] = (),
        affixes: Iterable[Affix] = (),
        pets: Iterable[Pet] = (),
    ) -> None:
        """Insert every record in one transaction.

        If any insert fails (a duplicate id, a NOT NULL column) nothing is
        kept and the sqlite3 error propagates.
        """
        with self._lock:
            try:
                for m in members:
                    self._insert_named("members", m)
                for b in breeds:
                    self._insert_named("breeds", b)
                for a in affixes:
                    self._insert_named("affixes", a)
                for p in pets:
                    self._insert_pet(p)
            except Exception:
                self._conn.rollback()
                raise
            self._conn.commit()

    def _name_of(self, table: str, rid: Optional[int]) -> Optional[str]:
        if rid is None:
            return None
        row = self._conn.execute(f"SELECT name FROM {table} WHERE id = ?", (rid,)).fetchone()
        return row["name"] if row else None

    def pet_details(self, pid: int) -> Optional[PetDetails]:
        """Load a pet together with everything its profile displays.

        Related names, the pet's own offspring and the offspring of its dam
        and sire are all read within one snapshot. Returns None when the pet
        does not exist; status filtering is left to the caller.
        """
        with self.snapshot():
            pet = self.get_pet(pid)
            if pet is None:
                return None
            return PetDetails(
                pet=pet,
                affix_name=self._name_of("affixes", pet.affix_id),
                breed_name=self._name_of("breeds", pet.breed_id),
                owner_name=self._name_of("members", pet.owner_id),
                breeder_name=self._name_of("members", pet.breeder_id),
                offspring=[PetLink.from_pet(p) for p in self.offspring_of(pet.id)],
                dam_offspring=[PetLink.from_pet(p) for p in self.offspring_of(pet.dam_id)],
                sire_offspring=[PetLink.from_pet(p) for p in self.offspring_of(pet.sire_id)],
            )

