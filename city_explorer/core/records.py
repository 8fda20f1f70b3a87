"""
city_explorer/core/records.py
The closed set of cacheable record shapes.

Every variant exposes fields_for_storage() → ordered [(field, value)]
which the gateway turns into an INSERT.  created_at is stamped once by the
mapper and never touched again; id only exists on Location and is assigned
by the store.
"""

from dataclasses import asdict, dataclass
from typing import Any, Optional, Union

from city_explorer.core.descriptor import ResourceType
from city_explorer.core.schema import schema_for


@dataclass
class Location:
    search_query:    str
    formatted_query: str
    latitude:        float
    longitude:       float
    created_at:      float
    id:              Optional[int] = None

    resource_type = ResourceType.LOCATION

    def fields_for_storage(self) -> list[tuple[str, Any]]:
        return [
            ("search_query",    self.search_query),
            ("formatted_query", self.formatted_query),
            ("latitude",        self.latitude),
            ("longitude",       self.longitude),
            ("created_at",      self.created_at),
        ]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Weather:
    forecast:    str
    time:        str
    created_at:  float
    location_id: int

    resource_type = ResourceType.WEATHER

    def fields_for_storage(self) -> list[tuple[str, Any]]:
        return [
            ("forecast",    self.forecast),
            ("time",        self.time),
            ("created_at",  self.created_at),
            ("location_id", self.location_id),
        ]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Event:
    link:        str
    name:        str
    event_date:  str
    summary:     str
    created_at:  float
    location_id: int

    resource_type = ResourceType.EVENT

    def fields_for_storage(self) -> list[tuple[str, Any]]:
        return [
            ("link",        self.link),
            ("name",        self.name),
            ("event_date",  self.event_date),
            ("summary",     self.summary),
            ("created_at",  self.created_at),
            ("location_id", self.location_id),
        ]

    def to_dict(self) -> dict:
        return asdict(self)


CacheRecord = Union[Location, Weather, Event]

RECORD_TYPES: dict[ResourceType, type] = {
    ResourceType.LOCATION: Location,
    ResourceType.WEATHER:  Weather,
    ResourceType.EVENT:    Event,
}


def record_from_row(resource_type: ResourceType, row) -> CacheRecord:
    """Rebuild a record from a stored row (mapping of column → value).

    Row ids are dropped for every type except location, whose id is part
    of the record.
    """
    schema = schema_for(resource_type)
    cls    = RECORD_TYPES[resource_type]
    values = {}
    for column in row.keys():
        name = schema.field_for(column)
        if name == "id" and not schema.returns_id:
            continue
        values[name] = row[column]
    return cls(**values)
