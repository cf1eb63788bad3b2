"""Tests for blob storage and the profile repository."""

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from property_scout.analysis import ScoringEngine
from property_scout.db.store import MemoryBlobStore, SqlBlobStore
from property_scout.profile import PROFILE_KEY, ProfileRepository, UserProfile
from tests.conftest import make_property


class TestMemoryBlobStore:

    def test_read_missing(self):
        assert MemoryBlobStore().read("nothing") is None

    def test_write_and_overwrite(self):
        store = MemoryBlobStore()
        store.write("k", "one")
        store.write("k", "two")

        assert store.read("k") == "two"


class TestSqlBlobStore:

    def test_round_trip(self, db_engine):
        store = SqlBlobStore(db_engine)

        store.write("user_profile", '{"interactions": []}')

        assert store.read("user_profile") == '{"interactions": []}'
        assert store.read("ai_usage_data") is None

    def test_overwrite(self, db_engine):
        store = SqlBlobStore(db_engine)
        store.write("k", "first")
        store.write("k", "second")

        assert store.read("k") == "second"

    def test_creates_table(self):
        from sqlalchemy import create_engine, inspect

        engine = create_engine("sqlite:///:memory:")
        SqlBlobStore(engine)

        assert "blobs" in inspect(engine).get_table_names()
        engine.dispose()

    def test_read_error_returns_none(self, db_engine):
        store = SqlBlobStore(db_engine)
        broken = MagicMock(side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")))
        store._session_factory = broken

        assert store.read("k") is None


class TestProfileRepository:

    def test_missing_profile_is_empty(self):
        profile = ProfileRepository(MemoryBlobStore()).load()

        assert profile.is_empty
        assert profile.average_price is None
        assert profile.preferred_types == {}

    def test_corrupt_profile_is_empty(self):
        store = MemoryBlobStore({PROFILE_KEY: "{not json"})

        assert ProfileRepository(store).load().is_empty

    def test_wrong_shape_is_empty(self):
        store = MemoryBlobStore({PROFILE_KEY: '{"interactions": "lots"}'})

        assert ProfileRepository(store).load().is_empty

    def test_read_error_is_empty(self):
        store = MagicMock()
        store.read.side_effect = RuntimeError("store offline")

        assert ProfileRepository(store).load().is_empty

    def test_save_and_load(self, db_engine):
        repository = ProfileRepository(SqlBlobStore(db_engine))
        profile = UserProfile()
        ScoringEngine().track_interaction(profile, make_property(price=420000), "save")

        repository.save(profile)
        loaded = repository.load()

        assert loaded.average_price == 420000
        assert loaded.preferred_types == {"Single Family": 1}
        assert loaded.preferred_bedrooms == 3
        assert loaded.interactions[0].action == "save"
        assert loaded.interactions[0].property["address"] == "123 Main St, Austin, TX 78701"
