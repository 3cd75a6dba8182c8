"""
Tests for bootstrap, identifiers and the legacy value mapping
"""

import pytest

from app.core.config import settings
from app.core.ids import new_id
from app.core.legacy import accepted_type_codes, sector_display_name, slugify, type_display_name
from app.repositories.taxonomy import PollutionTypeRepository, SectorRepository
from app.repositories.users import UserRepository
from app.services.auth import AuthService
from app.services.setup import initialize


class TestInitialize:
    def test_creates_admin_and_defaults(self, kv):
        initialize(kv)
        admin = UserRepository(kv).get_by_email(settings.admin_email)
        assert admin is not None and admin.is_admin
        assert len(PollutionTypeRepository(kv).get_all()) == 8
        assert len(SectorRepository(kv).get_all()) == 5
        AuthService(kv).login(settings.admin_email, settings.admin_password)

    def test_is_idempotent(self, kv):
        initialize(kv)
        initialize(kv)
        assert len(UserRepository(kv).get_all()) == 1
        assert len(SectorRepository(kv).get_all()) == 5

    def test_weak_admin_password_is_refused(self, kv, monkeypatch):
        monkeypatch.setattr(settings, "admin_password", "weak")
        with pytest.raises(ValueError):
            initialize(kv)


class TestIds:
    def test_format(self):
        rid = new_id()
        assert len(rid) == 36
        assert rid[14] == "7"

    def test_unique_and_ordered(self):
        ids = [new_id() for _ in range(500)]
        assert len(set(ids)) == 500
        assert ids == sorted(ids)


class TestLegacyMapping:
    NAMES = ["Air Pollution", "Bad Smell / Odor", "Other"]

    def test_slugify(self):
        assert slugify("Waste / Litter") == "waste__litter"

    def test_accepted_codes(self):
        codes = accepted_type_codes(self.NAMES)
        assert {"air", "air_pollution", "smell", "bad_smell__odor", "other"} <= codes
        assert "water" not in codes

    def test_display_names(self):
        assert type_display_name("air", self.NAMES) == "Air Pollution"
        assert type_display_name("bad_smell__odor", self.NAMES) == "Bad Smell / Odor"
        assert type_display_name("mystery", self.NAMES) == "mystery"
        assert sector_display_name(1, ["Harbour", "Hills"]) == "Harbour"
        assert sector_display_name(4, ["Harbour", "Hills"]) == "Sector 4"
