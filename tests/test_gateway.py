"""
Tests for the storage gateway.
"""

from __future__ import annotations

import pytest

from city_explorer.core.database import Database
from city_explorer.core.descriptor import ResourceDescriptor, ResourceType
from city_explorer.core.errors import ConfigurationError, StorageError
from city_explorer.core.gateway import StorageGateway
from city_explorer.core.mappers import map_events, map_location, map_weather
from city_explorer.core.records import Location, Weather

from conftest import EVENTS, FORECAST, GEOCODE_SEATTLE


SEATTLE = ResourceDescriptor.for_location("Seattle")


def weather_for(location_id: int) -> ResourceDescriptor:
    return ResourceDescriptor.for_dependent(ResourceType.WEATHER, location_id, 47.6, -122.3)


def events_for(location_id: int) -> ResourceDescriptor:
    return ResourceDescriptor.for_dependent(ResourceType.EVENT, location_id, formatted_query="Seattle, WA, USA")


class TestStatements:
    """Statements are built from the schema, never from free text."""

    def test_select_uses_search_query_for_location(self) -> None:
        sql = StorageGateway.select_statement(SEATTLE)
        assert sql == "SELECT * FROM locations WHERE search_query=?1 ORDER BY created_at DESC, id"

    def test_select_uses_location_id_for_dependents(self) -> None:
        assert "FROM weathers WHERE location_id=?1" in StorageGateway.select_statement(weather_for(5))
        assert "FROM events WHERE location_id=?1" in StorageGateway.select_statement(events_for(5))

    def test_insert_location_returns_id(self) -> None:
        record = map_location("Seattle", GEOCODE_SEATTLE, clock=lambda: 1.0)
        sql = StorageGateway.insert_statement(SEATTLE, record.fields_for_storage())
        assert sql == (
            "INSERT INTO locations (search_query, formatted_query, latitude, longitude, created_at) "
            "VALUES (?1, ?2, ?3, ?4, ?5) RETURNING id"
        )

    def test_insert_dependent_has_no_returning(self) -> None:
        record = map_weather(5, FORECAST, clock=lambda: 1.0)[0]
        sql = StorageGateway.insert_statement(weather_for(5), record.fields_for_storage())
        assert sql == (
            "INSERT INTO weathers (forecast, time, created_at, location_id) "
            "VALUES (?1, ?2, ?3, ?4)"
        )

    def test_unknown_field_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            StorageGateway.insert_statement(SEATTLE, [("drop_me", 1)])

    def test_delete_statement(self) -> None:
        assert StorageGateway.delete_statement(weather_for(5)) == "DELETE FROM weathers WHERE location_id=?1"


class TestReadWrite:
    @pytest.mark.asyncio
    async def test_read_missing_returns_empty_list(self, gateway: StorageGateway) -> None:
        assert await gateway.read(SEATTLE) == []
        assert await gateway.read(weather_for(99)) == []

    @pytest.mark.asyncio
    async def test_location_round_trip_includes_generated_id(self, gateway: StorageGateway) -> None:
        mapped = map_location("Seattle", GEOCODE_SEATTLE, clock=lambda: 1234.5)
        stored = await gateway.write(SEATTLE, mapped)

        assert stored.id is not None

        rows = await gateway.read(SEATTLE)
        assert len(rows) == 1
        assert rows[0] == stored
        assert rows[0].id == stored.id
        assert rows[0].search_query == "Seattle"
        assert rows[0].created_at == 1234.5

    @pytest.mark.asyncio
    async def test_ids_are_distinct_per_location(self, gateway: StorageGateway) -> None:
        a = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))
        b = await gateway.write(
            ResourceDescriptor.for_location("Portland"),
            map_location("Portland", GEOCODE_SEATTLE),
        )
        assert a.id != b.id

    @pytest.mark.asyncio
    async def test_weather_round_trip_excludes_id(self, gateway: StorageGateway) -> None:
        loc = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))
        desc = weather_for(loc.id)

        mapped = map_weather(loc.id, FORECAST, clock=lambda: 50.0)
        for record in mapped:
            await gateway.write(desc, record)

        rows = await gateway.read(desc)
        assert rows == mapped
        assert all(isinstance(r, Weather) for r in rows)
        assert not hasattr(rows[0], "id")

    @pytest.mark.asyncio
    async def test_event_round_trip(self, gateway: StorageGateway) -> None:
        loc = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))
        desc = events_for(loc.id)

        mapped = map_events(loc.id, EVENTS, clock=lambda: 50.0)
        for record in mapped:
            await gateway.write(desc, record)

        assert await gateway.read(desc) == mapped

    @pytest.mark.asyncio
    async def test_read_is_idempotent(self, gateway: StorageGateway) -> None:
        loc = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))
        for record in map_weather(loc.id, FORECAST):
            await gateway.write(weather_for(loc.id), record)

        first = await gateway.read(weather_for(loc.id))
        second = await gateway.read(weather_for(loc.id))
        assert first == second

    @pytest.mark.asyncio
    async def test_rows_are_scoped_to_their_key(self, gateway: StorageGateway) -> None:
        a = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))
        b = await gateway.write(
            ResourceDescriptor.for_location("Tacoma"), map_location("Tacoma", GEOCODE_SEATTLE)
        )
        for record in map_weather(a.id, FORECAST):
            await gateway.write(weather_for(a.id), record)

        assert len(await gateway.read(weather_for(a.id))) == 2
        assert await gateway.read(weather_for(b.id)) == []

    @pytest.mark.asyncio
    async def test_write_rejects_mismatched_record(self, gateway: StorageGateway) -> None:
        record = map_location("Seattle", GEOCODE_SEATTLE)
        with pytest.raises(StorageError):
            await gateway.write(weather_for(1), record)

    @pytest.mark.asyncio
    async def test_newest_generation_is_read_first(self, gateway: StorageGateway) -> None:
        loc = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))
        desc = weather_for(loc.id)
        await gateway.write(desc, Weather("Old news", "Mon Jan 01 2024", 10.0, loc.id))
        for record in map_weather(loc.id, FORECAST, clock=lambda: 20.0):
            await gateway.write(desc, record)

        rows = await gateway.read(desc)

        assert [r.created_at for r in rows] == [20.0, 20.0, 10.0]
        assert rows[-1].forecast == "Old news"

    @pytest.mark.asyncio
    async def test_location_exists(self, gateway: StorageGateway) -> None:
        loc = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))

        assert await gateway.location_exists(loc.id) is True
        assert await gateway.location_exists(loc.id + 1) is False


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_only_matching_key(self, gateway: StorageGateway) -> None:
        a = await gateway.write(SEATTLE, map_location("Seattle", GEOCODE_SEATTLE))
        b = await gateway.write(
            ResourceDescriptor.for_location("Tacoma"), map_location("Tacoma", GEOCODE_SEATTLE)
        )
        for loc in (a, b):
            for record in map_weather(loc.id, FORECAST):
                await gateway.write(weather_for(loc.id), record)

        deleted = await gateway.delete(weather_for(a.id))

        assert deleted == 2
        assert await gateway.read(weather_for(a.id)) == []
        assert len(await gateway.read(weather_for(b.id))) == 2

    @pytest.mark.asyncio
    async def test_delete_nothing_returns_zero(self, gateway: StorageGateway) -> None:
        assert await gateway.delete(weather_for(42)) == 0


class TestStorageErrors:
    @pytest.mark.asyncio
    async def test_closed_database_raises_storage_error(self, tmp_path) -> None:
        gw = StorageGateway(Database(tmp_path / "never_opened.db"))
        with pytest.raises(StorageError):
            await gw.read(SEATTLE)

    @pytest.mark.asyncio
    async def test_failed_statement_carries_sql(self, db: Database, gateway: StorageGateway) -> None:
        await db.connection.execute("DROP TABLE weathers")
        await db.connection.commit()

        with pytest.raises(StorageError) as exc_info:
            await gateway.read(weather_for(1))

        assert exc_info.value.statement is not None
        assert "weathers" in exc_info.value.statement

    @pytest.mark.asyncio
    async def test_insert_failure_is_not_swallowed(self, db: Database, gateway: StorageGateway) -> None:
        # location_id must reference an existing location
        record = Weather(forecast="Sunny", time="Mon Jan 01 2024", created_at=1.0, location_id=999)
        with pytest.raises(StorageError):
            await gateway.write(weather_for(999), record)

    @pytest.mark.asyncio
    async def test_write_attaches_id_to_given_record(self, gateway: StorageGateway) -> None:
        record = Location("Seattle", "Seattle, WA, USA", 47.6, -122.3, created_at=1.0)
        stored = await gateway.write(SEATTLE, record)
        assert stored is record
        assert record.id is not None
