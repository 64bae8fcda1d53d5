"""
Tests for seeding system climates and styles.
"""

import pytest

from climate.guard_rails import is_permitted
from models import Climate, Style
from seeds import load_seed_file, seed_all, seed_system_climates, seed_system_styles


class TestSeedFiles:
    """Test cases for the bundled seed YAML files"""

    def test_bundled_climates_are_coherent(self):
        records = load_seed_file("system_climates.yaml", "climates")

        assert len(records) == 5
        for record in records:
            assert is_permitted(record), record["name"]

    def test_bundled_styles_have_hook_and_cta(self):
        records = load_seed_file("system_styles.yaml", "styles")

        assert len(records) == 4
        for record in records:
            assert record["hook_type"] and record["cta_type"], record["name"]

    def test_custom_seed_dir(self, tmp_path):
        (tmp_path / "extra.yaml").write_text("climates:\n  - name: Only one\n    emotional_state: THREAT\n")
        assert load_seed_file("extra.yaml", "climates", seed_dir=tmp_path) == [
            {"name": "Only one", "emotional_state": "THREAT"}
        ]

    def test_missing_key(self, tmp_path):
        (tmp_path / "empty.yaml").write_text("")
        assert load_seed_file("empty.yaml", "styles", seed_dir=tmp_path) == []


class TestSeeding:
    """Test cases for seed_system_climates(), seed_system_styles() and seed_all()"""

    def test_seed_all(self, db_session):
        seed_all(db_session)

        climates = db_session.query(Climate).all()
        styles = db_session.query(Style).all()
        assert len(climates) == 5
        assert len(styles) == 4
        assert all(c.is_system and c.user_id is None for c in climates)
        assert all(s.is_system and s.user_id is None for s in styles)

    def test_sentence_length_follows_pressure(self, db_session):
        seed_system_climates(db_session)

        tension = db_session.query(Climate).filter(Climate.name == "Tension & Drama").one()
        assert tension.narrative_pressure == "FAST"
        assert tension.sentence_max_words == 8

    def test_reseeding_updates_in_place(self, db_session):
        seed_all(db_session)
        seed_all(db_session)

        assert db_session.query(Climate).count() == 5
        assert db_session.query(Style).count() == 4

    def test_existing_record_is_updated(self, db_session):
        seed_system_styles(db_session, [{"name": "Explainer", "content_type": "EDUCATIONAL", "hook_type": "QUESTION"}])
        seed_system_styles(db_session, [{"name": "Explainer", "content_type": "EDUCATIONAL", "hook_type": "CONTRAST"}])

        styles = db_session.query(Style).filter(Style.name == "Explainer").all()
        assert len(styles) == 1
        assert styles[0].hook_type == "CONTRAST"

    def test_incoherent_record_is_corrected(self, db_session):
        count = seed_system_climates(db_session, [
            {"name": "Broken", "emotional_state": "FASCINATION", "closing_type": "CTA_DIRECT"},
        ])

        climate = db_session.query(Climate).filter(Climate.name == "Broken").one()
        assert count == 1
        assert climate.closing_type == "REVELATION"
        assert climate.narrative_pressure == "SLOW"
        assert climate.sentence_max_words == 20

    def test_personal_climate_with_same_name_is_untouched(self, db_session, make_climate):
        personal = make_climate(name="Curiosity & Mystery", hook_type="MYSTERY")

        seed_system_climates(db_session)

        db_session.refresh(personal)
        assert personal.hook_type == "MYSTERY"
        assert db_session.query(Climate).filter(Climate.name == "Curiosity & Mystery").count() == 2

    def test_unknown_state_raises(self, db_session):
        with pytest.raises(ValueError):
            seed_system_climates(db_session, [{"name": "Bad", "emotional_state": "BOREDOM"}])

    def test_explicit_sentence_length_follows_corrected_pressure(self, db_session):
        seed_system_climates(db_session, [{
            "name": "Wonder",
            "emotional_state": "FASCINATION",
            "narrative_pressure": "FAST",
            "sentence_max_words": 8,
        }])

        climate = db_session.query(Climate).filter(Climate.name == "Wonder").one()
        assert climate.narrative_pressure == "SLOW"
        assert climate.sentence_max_words == 20
