from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from typing import Optional
import logging

from ..ancestors import InvalidGenerations
from ..config import load_config
from ..pedigree import get_pedigree, validate_generations
from ..profile import assemble_profile, PROFILE_GENERATIONS
from ..storage import Storage

app = FastAPI(title="petz-py")

cfg = load_config()
logging.basicConfig(level=cfg.log_level)

templates = Jinja2Templates(directory=str(cfg.templates_dir))

# Created on startup so that importing the module never touches the data dir.
storage: Optional[Storage] = None


@app.on_event("startup")
def _open_storage_on_startup():
    global storage
    storage = Storage(cfg.data_dir)
    logging.info("Storage opened at %s", str(cfg.data_dir))


@app.on_event("shutdown")
def _close_storage_on_shutdown():
    global storage
    if storage is not None:
        storage.close()
        storage = None


def _storage() -> Storage:
    if storage is None:
        raise HTTPException(status_code=503, detail="Storage not initialized")
    return storage


def _pedigree_or_error(pet_id: int, generations: int):
    try:
        validate_generations(generations, cfg.max_generations)
    except InvalidGenerations as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        pedigree = get_pedigree(_storage(), pet_id, generations)
    except Exception:
        logging.exception("Failed to build pedigree for pet %s", pet_id)
        raise
    if pedigree is None:
        raise HTTPException(status_code=404, detail="Pet not found")
    return pedigree


def _profile_or_error(pet_id: int):
    try:
        profile = assemble_profile(_storage(), pet_id)
    except Exception:
        logging.exception("Failed to assemble profile for pet %s", pet_id)
        raise
    if profile is None:
        raise HTTPException(status_code=404, detail="Pet not found")
    return profile


### JSON API
@app.get("/api/pets/{pet_id}")
def api_pet_profile(pet_id: int):
    """Return the profile of a registered pet."""
    return _profile_or_error(pet_id).to_dict()


@app.get("/api/pets/{pet_id}/pedigree")
def api_pet_pedigree(pet_id: int, generations: int = PROFILE_GENERATIONS):
    """Return the pedigree of a pet over `generations` generations."""
    return _pedigree_or_error(pet_id, generations).to_dict()


### HTML views
@app.get("/pet/{pet_id}", response_class=HTMLResponse)
def pet_page(request: Request, pet_id: int):
    profile = _profile_or_error(pet_id)
    logging.info(
        "Rendering pet_page for %s: offspring=%d siblings=%d",
        pet_id,
        len(profile.offspring),
        len(profile.siblings),
    )
    return templates.TemplateResponse(request, "pet.html", {"profile": profile})


@app.get("/pet/{pet_id}/pedigree", response_class=HTMLResponse)
def pedigree_page(request: Request, pet_id: int, generations: int = PROFILE_GENERATIONS):
    pedigree = _pedigree_or_error(pet_id, generations)
    pet = _storage().get_pet(pet_id)
    return templates.TemplateResponse(
        request,
        "pedigree.html",
        {"pet": pet, "pedigree": pedigree, "generations": generations},
    )
