from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from typing import Dict, List, Optional

from .dependencies import get_catalog, get_random_source
from ..config import settings
from ..exceptions import BuildInvalid, NotationError, SessionLocked
from ..models.catalog import ReferenceCatalog
from ..models.character import AttributeName, BuildSession
from ..managers import state_manager, history_manager
from ..services import build_validator, character_builder, trait_ledger
from ..services.dice_roller import DICE_PRESETS, RandomSource, evaluate, parse
from ..services.roll_history import HISTORY_CAPACITY
from ..utils.logger import logger

router = APIRouter()


# ─── Request / Response schemas ───────────────────────────────────────────────

class BuildRequest(BaseModel):
    session: BuildSession


class AttributeChangeRequest(BaseModel):
    session: BuildSession
    attribute: AttributeName
    delta: int


class BuildDetailsRequest(BaseModel):
    session: BuildSession
    name: Optional[str] = None
    race: Optional[str] = None
    character_class: Optional[str] = None
    background: Optional[str] = None


class TraitToggleRequest(BaseModel):
    session: BuildSession
    trait_id: str


class CreateCharacterRequest(BaseModel):
    name: str = ""
    race: Optional[str] = None
    character_class: Optional[str] = None
    background: str = ""
    attribute_points: Dict[str, int] = {}
    advantages: List[str] = []
    disadvantages: List[str] = []


class RollRequest(BaseModel):
    notation: str = "d20"
    description: str = ""
    roller_id: Optional[str] = None


def _build_response(session: BuildSession, catalog: ReferenceCatalog, **extra) -> dict:
    report = build_validator.evaluate(session, catalog)
    return {
        "session": session.model_dump(mode="json"),
        "report": report.model_dump(mode="json"),
        **extra,
    }


def _locked(e: SessionLocked) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# ─── Character build endpoints ────────────────────────────────────────────────

@router.get("/api/characters/reference-data")
async def reference_data(catalog: ReferenceCatalog = Depends(get_catalog)):
    return catalog.model_dump(mode="json")


@router.post("/api/characters/build")
async def start_build(catalog: ReferenceCatalog = Depends(get_catalog)):
    return _build_response(character_builder.new_session(), catalog)


@router.post("/api/characters/build/evaluate")
async def evaluate_build(req: BuildRequest, catalog: ReferenceCatalog = Depends(get_catalog)):
    return _build_response(req.session, catalog)


@router.post("/api/characters/build/attributes")
async def change_attribute(req: AttributeChangeRequest, catalog: ReferenceCatalog = Depends(get_catalog)):
    try:
        session, rejected = character_builder.adjust_attribute(req.session, req.attribute, req.delta)
    except SessionLocked as e:
        raise _locked(e)
    return _build_response(session, catalog, rejected=rejected)


@router.post("/api/characters/build/details")
async def change_details(req: BuildDetailsRequest, catalog: ReferenceCatalog = Depends(get_catalog)):
    session = req.session
    try:
        if req.name is not None:
            session = character_builder.rename(session, req.name)
        if req.race is not None:
            session = character_builder.select_race(session, req.race)
        if req.character_class is not None:
            session = character_builder.select_class(session, req.character_class)
        if req.background is not None:
            session = character_builder.set_background(session, req.background)
    except SessionLocked as e:
        raise _locked(e)
    return _build_response(session, catalog)


@router.post("/api/characters/build/advantages/toggle")
async def toggle_advantage(req: TraitToggleRequest, catalog: ReferenceCatalog = Depends(get_catalog)):
    try:
        session = trait_ledger.toggle_advantage(req.session, req.trait_id)
    except SessionLocked as e:
        raise _locked(e)
    return _build_response(session, catalog)


@router.post("/api/characters/build/disadvantages/toggle")
async def toggle_disadvantage(req: TraitToggleRequest, catalog: ReferenceCatalog = Depends(get_catalog)):
    try:
        session = trait_ledger.toggle_disadvantage(req.session, req.trait_id)
    except SessionLocked as e:
        raise _locked(e)
    return _build_response(session, catalog)


# ─── Character roster endpoints ───────────────────────────────────────────────

@router.post("/api/characters/")
async def create_character(req: CreateCharacterRequest, catalog: ReferenceCatalog = Depends(get_catalog)):
    try:
        _, snapshot = build_validator.submit_request(req.model_dump(), catalog)
    except BuildInvalid as e:
        raise HTTPException(
            status_code=422,
            detail={"error": "Character build is not valid", "violations": e.violations},
        )
    saved = await state_manager.create_character(snapshot)
    return saved.model_dump(mode="json")


@router.get("/api/characters/")
async def list_characters():
    chars = await state_manager.list_characters()
    return [c.model_dump(mode="json") for c in chars]


@router.get("/api/characters/{character_id}")
async def get_character(character_id: str):
    character = await state_manager.get_character(character_id)
    if not character:
        raise HTTPException(status_code=404, detail="Character not found")
    return character.model_dump(mode="json")


@router.delete("/api/characters/{character_id}")
async def delete_character(character_id: str):
    if not await state_manager.delete_character(character_id):
        raise HTTPException(status_code=404, detail="Character not found")
    return {"message": "Character deleted"}


# ─── Dice endpoints ───────────────────────────────────────────────────────────

@router.post("/api/dice/roll")
async def dice_roll(req: RollRequest, source: RandomSource = Depends(get_random_source)):
    try:
        spec = parse(req.notation)
    except NotationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if spec.count > settings.DICE_MAX_COUNT:
        raise HTTPException(
            status_code=400,
            detail=f"Dice count must be at most {settings.DICE_MAX_COUNT}, got {spec.count}",
        )

    result = evaluate(spec, source, req.description)
    response = result.to_dict()
    if req.roller_id:
        entry = history_manager.get_history(req.roller_id).record(result)
        response["history_id"] = entry.id
        logger.debug(f"{req.roller_id} {result.summary()}")
    return response


@router.get("/api/dice/presets")
async def dice_presets():
    return {"presets": DICE_PRESETS}


@router.get("/api/dice/history/{roller_id}")
async def dice_history(roller_id: str):
    history = history_manager.find_history(roller_id)
    if history is None:
        return {"capacity": HISTORY_CAPACITY, "entries": []}
    return history.to_dict()


@router.delete("/api/dice/history/{roller_id}")
async def clear_dice_history(roller_id: str):
    history_manager.clear_history(roller_id)
    return {"message": "History cleared"}


# ─── Health check ──────────────────────────────────────────────────────────────

@router.get("/api/health")
async def health(catalog: ReferenceCatalog = Depends(get_catalog)):
    return {
        "status": "ok",
        "reference_data": "loaded" if catalog.loaded else "loading",
        "races": len(catalog.races),
        "classes": len(catalog.classes),
    }
