"""
city_explorer/core/schema.py
═══════════════════════════════════════════════════════════════════════════════
Per-resource-type storage layout.

Each resource type declares its table and an ordered list of
(field name, column name, storage type).  The gateway builds every
statement from these declarations, so one code path serves every type and
no identifier that isn't declared here ever reaches SQL text.

  table = resource type + "s"      (location → locations, event → events)
  locations  keyed by search_query, id generated on insert
  the rest   keyed by location_id (FK → locations.id)
═══════════════════════════════════════════════════════════════════════════════
"""

from dataclasses import dataclass, field

from city_explorer.core.descriptor import ResourceType
from city_explorer.core.errors import ConfigurationError


@dataclass(frozen=True)
class Column:
    field:   str
    name:    str
    sql_type: str


@dataclass(frozen=True)
class ResourceSchema:
    resource_type: ResourceType
    key_column:    str
    columns:       tuple[Column, ...]
    returns_id:    bool = False
    _by_field:     dict = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        self._by_field.update({c.field: c for c in self.columns})

    @property
    def table(self) -> str:
        return f"{self.resource_type.value}s"

    def column_for(self, field_name: str) -> str:
        col = self._by_field.get(field_name)
        if col is None:
            raise ConfigurationError(f"{self.table} has no column for field '{field_name}'")
        return col.name

    def field_for(self, column_name: str) -> str:
        for col in self.columns:
            if col.name == column_name:
                return col.field
        if column_name == "id":
            return "id"
        raise ConfigurationError(f"{self.table} has no field for column '{column_name}'")

    def create_statements(self) -> list[str]:
        cols = ["id INTEGER PRIMARY KEY AUTOINCREMENT"]
        for c in self.columns:
            if c.name == "location_id":
                cols.append(f"{c.name} {c.sql_type} REFERENCES locations(id)")
            else:
                cols.append(f"{c.name} {c.sql_type}")
        return [
            f"CREATE TABLE IF NOT EXISTS {self.table} ({', '.join(cols)})",
            f"CREATE INDEX IF NOT EXISTS idx_{self.table}_{self.key_column} "
            f"ON {self.table}({self.key_column})",
        ]


SCHEMAS: dict[ResourceType, ResourceSchema] = {
    ResourceType.LOCATION: ResourceSchema(
        ResourceType.LOCATION,
        key_column="search_query",
        columns=(
            Column("search_query",    "search_query",    "TEXT NOT NULL"),
            Column("formatted_query", "formatted_query", "TEXT"),
            Column("latitude",        "latitude",        "REAL"),
            Column("longitude",       "longitude",       "REAL"),
            Column("created_at",      "created_at",      "REAL NOT NULL"),
        ),
        returns_id=True,
    ),
    ResourceType.WEATHER: ResourceSchema(
        ResourceType.WEATHER,
        key_column="location_id",
        columns=(
            Column("forecast",    "forecast",    "TEXT"),
            Column("time",        "time",        "TEXT"),
            Column("created_at",  "created_at",  "REAL NOT NULL"),
            Column("location_id", "location_id", "INTEGER NOT NULL"),
        ),
    ),
    ResourceType.EVENT: ResourceSchema(
        ResourceType.EVENT,
        key_column="location_id",
        columns=(
            Column("link",        "link",        "TEXT"),
            Column("name",        "name",        "TEXT"),
            Column("event_date",  "event_date",  "TEXT"),
            Column("summary",     "summary",     "TEXT"),
            Column("created_at",  "created_at",  "REAL NOT NULL"),
            Column("location_id", "location_id", "INTEGER NOT NULL"),
        ),
    ),
}


def schema_for(resource_type: ResourceType) -> ResourceSchema:
    try:
        return SCHEMAS[resource_type]
    except KeyError:
        raise ConfigurationError(f"No storage schema for resource type '{resource_type}'") from None
