"""
Climates API Router

Provides endpoints for:
- Listing system and personal climates
- Creating/updating personal climates (guard rails applied before saving)
- Validating a combination without saving it
- The compatibility table and enum metadata for editors
"""

import uuid
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from auth import get_current_user_id
from climate.behavior_mapping import describe_climate, enum_options, sentence_max_words
from climate.guard_rails import (
    ClimateConfigError,
    diff_corrections,
    get_corrected_config,
    rules_table,
    validate_climate_configuration,
)
from database import get_db
from models import Climate
from schemas import (
    ClimateCreateRequest,
    ClimateUpdateRequest,
    ClimateValidateRequest,
    ClimateValidationResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/climates", tags=["Climates"])

GUARDED_FIELDS = ("emotional_state", "revelation_dynamic", "narrative_pressure", "hook_type", "closing_type")


def _serialize(climate: Climate, corrections: Dict[str, Any] = None) -> Dict[str, Any]:
    data = climate.to_dict()
    data["behavior"] = describe_climate(data)
    if corrections is not None:
        data["corrections"] = corrections
    return data


def _correct(values: Dict[str, Any]):
    """Run values through the guard rails; unknown emotional state → 400"""
    try:
        corrected = get_corrected_config(values)
    except ClimateConfigError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return corrected, diff_corrections(values, corrected)


def _get_visible(db: Session, climate_id: str, user_id: str) -> Climate:
    climate = db.query(Climate).filter(Climate.id == climate_id).first()
    if not climate or (not climate.is_system and climate.user_id != user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Climate {climate_id} not found")
    return climate


def _get_owned(db: Session, climate_id: str, user_id: str) -> Climate:
    climate = db.query(Climate).filter(Climate.id == climate_id).first()
    if not climate:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Climate {climate_id} not found")
    if climate.is_system or climate.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="System climates and climates of other users cannot be modified",
        )
    return climate


@router.get("/rules", summary="Compatibility Table")
async def get_rules():
    """Permitted revelation/pressure/hook/closing values per emotional state (first = default)."""
    return rules_table()


@router.get("/options", summary="Climate Field Options")
async def get_options():
    """Every climate enum value with its label, icon and subtitle."""
    return enum_options()


@router.post("/validate", response_model=ClimateValidationResponse, summary="Validate Climate Combination")
async def validate_climate(request: ClimateValidateRequest):
    """
    Check a combination without saving it.

    **Response:**
    ```json
    {
      "valid": false,
      "errors": ["Closing \\"CTA_DIRECT\\" is not recommended for emotional state \\"FASCINATION\\""],
      "corrected": {"emotional_state": "FASCINATION", "closing_type": "REVELATION", "...": "..."}
    }
    ```
    """
    try:
        result = validate_climate_configuration(request.model_dump())
    except ClimateConfigError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return result.to_dict()


@router.get("", summary="List Climates")
async def list_climates(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """System climates first, then the user's own, each group sorted by name."""
    climates = (
        db.query(Climate)
        .filter((Climate.is_system.is_(True)) | (Climate.user_id == user_id))
        .order_by(Climate.is_system.desc(), Climate.name)
        .all()
    )
    return [_serialize(c) for c in climates]


@router.get("/{climate_id}", summary="Get Climate")
async def get_climate(
    climate_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _serialize(_get_visible(db, climate_id, user_id))


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Climate")
async def create_climate(
    request: ClimateCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Create a personal climate.

    Incompatible values are replaced by the first permitted value for the
    emotional state; the response lists them under `corrections`.
    """
    values = request.model_dump()
    corrected, corrections = _correct(values)

    climate = Climate(
        id=str(uuid.uuid4()),
        user_id=user_id,
        is_system=False,
        name=request.name,
        description=request.description,
        icon=request.icon or "🎭",
        min_scenes=request.min_scenes,
        max_scenes=request.max_scenes,
        prompt_fragment=request.prompt_fragment,
        behavior_preview=request.behavior_preview,
        sentence_max_words=sentence_max_words(corrected.narrative_pressure),
        **corrected.to_dict(),
    )
    db.add(climate)
    db.commit()
    db.refresh(climate)

    if corrections:
        logger.info("climate_corrected", climate_id=climate.id, corrections=corrections)
    logger.info("climate_created", climate_id=climate.id, user_id=user_id)

    return _serialize(climate, corrections)


@router.put("/{climate_id}", summary="Update Climate")
async def update_climate(
    climate_id: str,
    request: ClimateUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Merge the update into the stored climate, then apply the guard rails."""
    climate = _get_owned(db, climate_id, user_id)
    changes = request.model_dump(exclude_unset=True)
    # An explicit null keeps the stored value of a guarded field
    changes = {k: v for k, v in changes.items() if not (k in GUARDED_FIELDS and v is None)}

    merged = {field: getattr(climate, field) for field in GUARDED_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in GUARDED_FIELDS})
    corrected, corrections = _correct(merged)

    for field, value in changes.items():
        if field not in GUARDED_FIELDS:
            setattr(climate, field, value)
    for field, value in corrected.to_dict().items():
        setattr(climate, field, value)
    climate.sentence_max_words = sentence_max_words(corrected.narrative_pressure)

    db.commit()
    db.refresh(climate)

    if corrections:
        logger.info("climate_corrected", climate_id=climate.id, corrections=corrections)
    logger.info("climate_updated", climate_id=climate.id, fields=sorted(changes))

    return _serialize(climate, corrections)


@router.delete("/{climate_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Climate")
async def delete_climate(
    climate_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    climate = _get_owned(db, climate_id, user_id)
    db.delete(climate)
    db.commit()
    logger.info("climate_deleted", climate_id=climate_id, user_id=user_id)
