"""
System climates and styles, loaded from seed_data/*.yaml

Records are upserted by name so reseeding updates existing rows instead of
duplicating them. Climates go through the guard rails before saving.
"""

import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml
from sqlalchemy.orm import Session

from climate.behavior_mapping import sentence_max_words
from climate.guard_rails import get_corrected_config, diff_corrections
from models import Climate, Style

logger = structlog.get_logger()

SEED_DIR = Path(__file__).parent / "seed_data"

CLIMATE_FIELDS = ("name", "description", "icon", "min_scenes", "max_scenes", "prompt_fragment", "behavior_preview")
STYLE_FIELDS = (
    "name", "description", "icon", "content_type", "target_audience", "keywords",
    "discourse_architecture", "language_register", "script_function", "narrator_posture",
    "content_complexity", "advanced_instructions", "hook_type", "hook_example",
    "cta_type", "cta_example", "visual_prompt_base", "compatible_climates",
)


def load_seed_file(filename: str, key: str, seed_dir: Optional[Path] = None) -> List[Dict[str, Any]]:
    """Read a list of records from a seed YAML file"""
    path = (seed_dir or SEED_DIR) / filename
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return data.get(key) or []


def seed_system_climates(db: Session, records: Optional[List[Dict[str, Any]]] = None) -> int:
    """Upsert system climates. Returns the number of records written."""
    records = records if records is not None else load_seed_file("system_climates.yaml", "climates")

    for record in records:
        corrected = get_corrected_config(record)
        changes = diff_corrections(record, corrected)
        if changes:
            logger.warning("seed_climate_corrected", name=record["name"], corrections=changes)

        values = {field: record.get(field) for field in CLIMATE_FIELDS if field in record}
        values.update(corrected.to_dict())
        values["sentence_max_words"] = sentence_max_words(corrected.narrative_pressure)

        climate = (
            db.query(Climate)
            .filter(Climate.is_system.is_(True), Climate.name == record["name"])
            .first()
        )
        if climate is None:
            climate = Climate(id=str(uuid.uuid4()), is_system=True, user_id=None)
            db.add(climate)

        for field, value in values.items():
            setattr(climate, field, value)

    db.commit()
    logger.info("system_climates_seeded", count=len(records))
    return len(records)


def seed_system_styles(db: Session, records: Optional[List[Dict[str, Any]]] = None) -> int:
    """Upsert system styles. Returns the number of records written."""
    records = records if records is not None else load_seed_file("system_styles.yaml", "styles")

    for record in records:
        style = (
            db.query(Style)
            .filter(Style.is_system.is_(True), Style.name == record["name"])
            .first()
        )
        if style is None:
            style = Style(id=str(uuid.uuid4()), is_system=True, user_id=None)
            db.add(style)

        for field in STYLE_FIELDS:
            if field in record:
                setattr(style, field, record[field])

    db.commit()
    logger.info("system_styles_seeded", count=len(records))
    return len(records)


def seed_all(db: Session) -> None:
    seed_system_climates(db)
    seed_system_styles(db)
