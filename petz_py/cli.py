"""Command-line access to the pet registry.

Usage examples:

petz load --file pets.json --data-dir data
petz list
petz profile 12
petz pedigree 12 --generations 4

"""
from pathlib import Path
import argparse
import json
import logging
import sys

from .ancestors import InvalidGenerations
from .config import load_config
from .loader import load_file
from .pedigree import get_pedigree, validate_generations
from .profile import assemble_profile, PROFILE_GENERATIONS
from .storage import Storage


def _print_json(obj) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def main(argv=None):
    cfg = load_config()

    p = argparse.ArgumentParser(prog="petz")
    p.add_argument("--data-dir", default=str(cfg.data_dir), help="Data dir (where storage.db lives or will be created)")
    sub = p.add_subparsers(dest="cmd", required=True)
    ld = sub.add_parser("load", help="Load a JSON dump of members, breeds, affixes and pets")
    ld.add_argument("--file", "-f", required=True, help="Path to the JSON dump")
    sub.add_parser("list", help="List all pets")
    prof = sub.add_parser("profile", help="Print the profile of a pet")
    prof.add_argument("pet_id", type=int)
    ped = sub.add_parser("pedigree", help="Print the pedigree of a pet")
    ped.add_argument("pet_id", type=int)
    ped.add_argument("--generations", "-g", type=int, default=PROFILE_GENERATIONS)

    args = p.parse_args(argv)
    logging.basicConfig(level=cfg.log_level, format="%(levelname)s: %(message)s")

    storage = Storage(Path(args.data_dir))
    try:
        if args.cmd == "load":
            src = Path(args.file)
            if not src.exists():
                print(f"Dump file not found: {src}", file=sys.stderr)
                return 2
            try:
                counts = load_file(src, storage)
            except ValueError as e:
                print(f"Could not load {src}: {e}", file=sys.stderr)
                return 2
            print(f"Loaded {counts['pets']} pets")
            return 0

        if args.cmd == "list":
            for pet in storage.list_pets():
                print(f"ID: {pet.id}, Name: {pet.show_name}, Sex: {pet.sex or '-'}, Status: {pet.status.value}")
            return 0

        if args.cmd == "profile":
            profile = assemble_profile(storage, args.pet_id)
            if profile is None:
                print(f"Pet {args.pet_id} not found", file=sys.stderr)
                return 1
            _print_json(profile.to_dict())
            return 0

        if args.cmd == "pedigree":
            try:
                generations = validate_generations(args.generations, cfg.max_generations)
            except InvalidGenerations as e:
                print(str(e), file=sys.stderr)
                return 2
            pedigree = get_pedigree(storage, args.pet_id, generations)
            if pedigree is None:
                print(f"Pet {args.pet_id} not found", file=sys.stderr)
                return 1
            _print_json(pedigree.to_dict())
            return 0
    finally:
        storage.close()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
