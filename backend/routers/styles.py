"""
Styles API Router

Provides endpoints for:
- Listing system and personal styles
- CRUD on personal styles
- Field options and climate affinities for style editors
"""

import uuid
from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from auth import get_current_user_id
from climate.enums import EmotionalState
from database import get_db
from models import Style
from schemas import StyleCreateRequest, StyleUpdateRequest
from styles.options import STYLE_FIELDS, all_options, suggest_climates

logger = structlog.get_logger()

router = APIRouter(prefix="/api/styles", tags=["Styles"])


def _check_values(values: Dict[str, Any]) -> None:
    """Reject enum-backed fields holding unknown values (400)"""
    invalid = []
    for field, enum_type, _ in STYLE_FIELDS:
        value = values.get(field)
        if value is not None and value not in {member.value for member in enum_type}:
            invalid.append(field)

    states = {s.value for s in EmotionalState}
    if any(state not in states for state in values.get("compatible_climates") or []):
        invalid.append("compatible_climates")

    if invalid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid values for: {', '.join(invalid)}",
        )


def _get_visible(db: Session, style_id: str, user_id: str) -> Style:
    style = db.query(Style).filter(Style.id == style_id).first()
    if not style or (not style.is_system and style.user_id != user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Style {style_id} not found")
    return style


def _get_owned(db: Session, style_id: str, user_id: str) -> Style:
    style = db.query(Style).filter(Style.id == style_id).first()
    if not style:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Style {style_id} not found")
    if style.is_system or style.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="System styles and styles of other users cannot be modified",
        )
    return style


@router.get("/options", summary="Style Field Options")
async def get_options():
    """Every style enum value with its label, keyed by field name."""
    return all_options()


@router.get("/affinities/{content_type}", summary="Suggested Climates")
async def get_affinities(content_type: str):
    """Emotional states that naturally fit a content type."""
    try:
        suggestions = suggest_climates(content_type)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown content type '{content_type}'",
        )
    return {"content_type": content_type, "emotional_states": suggestions}


@router.get("", summary="List Styles")
async def list_styles(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    styles = (
        db.query(Style)
        .filter((Style.is_system.is_(True)) | (Style.user_id == user_id))
        .order_by(Style.is_system.desc(), Style.name)
        .all()
    )
    return [s.to_dict() for s in styles]


@router.get("/{style_id}", summary="Get Style")
async def get_style(
    style_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _get_visible(db, style_id, user_id).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create Style")
async def create_style(
    request: StyleCreateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    values = request.model_dump()
    _check_values(values)

    style = Style(id=str(uuid.uuid4()), user_id=user_id, is_system=False, **values)
    if style.icon is None:
        style.icon = "🎬"
    db.add(style)
    db.commit()
    db.refresh(style)

    logger.info("style_created", style_id=style.id, user_id=user_id)
    return style.to_dict()


@router.put("/{style_id}", summary="Update Style")
async def update_style(
    style_id: str,
    request: StyleUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    style = _get_owned(db, style_id, user_id)
    changes = request.model_dump(exclude_unset=True)
    _check_values(changes)

    for field, value in changes.items():
        setattr(style, field, value)
    db.commit()
    db.refresh(style)

    logger.info("style_updated", style_id=style.id, fields=sorted(changes))
    return style.to_dict()


@router.delete("/{style_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Style")
async def delete_style(
    style_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    style = _get_owned(db, style_id, user_id)
    db.delete(style)
    db.commit()
    logger.info("style_deleted", style_id=style_id, user_id=user_id)
