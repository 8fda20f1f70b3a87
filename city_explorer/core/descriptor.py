"""
city_explorer/core/descriptor.py
What is being asked for: a resource type plus its single lookup key.

  location   → keyed by the raw search string ("search_query")
  everything → keyed by the owning location's id ("location_id")

Fetch parameters (lat/lng, formatted address) ride along so the upstream
call can be made on a miss without another lookup.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ResourceType(str, Enum):
    LOCATION = "location"
    WEATHER  = "weather"
    EVENT    = "event"


@dataclass(frozen=True)
class ResourceDescriptor:
    resource_type:   ResourceType
    search_query:    Optional[str]   = None
    location_id:     Optional[int]   = None
    latitude:        Optional[float] = None
    longitude:       Optional[float] = None
    formatted_query: Optional[str]   = None

    def __post_init__(self):
        if self.resource_type is ResourceType.LOCATION:
            if not self.search_query:
                raise ValueError("location lookups need a search query")
            if self.location_id is not None:
                raise ValueError("location lookups are keyed by search query, not location_id")
        else:
            if self.location_id is None:
                raise ValueError(f"{self.resource_type.value} lookups need a location_id")
            if self.search_query is not None:
                raise ValueError(f"{self.resource_type.value} lookups are keyed by location_id")

    @classmethod
    def for_location(cls, search_query: str) -> "ResourceDescriptor":
        return cls(ResourceType.LOCATION, search_query=search_query)

    @classmethod
    def for_dependent(
        cls,
        resource_type: ResourceType,
        location_id: int,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        formatted_query: Optional[str] = None,
    ) -> "ResourceDescriptor":
        return cls(
            resource_type,
            location_id=location_id,
            latitude=latitude,
            longitude=longitude,
            formatted_query=formatted_query,
        )

    @property
    def key_value(self) -> Union[str, int]:
        if self.resource_type is ResourceType.LOCATION:
            return self.search_query
        return self.location_id

    @property
    def cache_key(self) -> str:
        """Stable string identifying the cached generation, e.g. 'weather:5'."""
        return f"{self.resource_type.value}:{self.key_value}"
