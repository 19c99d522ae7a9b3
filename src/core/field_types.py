"""Logical field types and the capability objects that map them to storage backends."""

from enum import StrEnum
from typing import Any, ClassVar, Literal, Protocol

from pydantic import BaseModel, ConfigDict

from src.core.errors import SchemaConstructionError


class FieldType(StrEnum):
    """Backend-independent field types."""

    UUID = "uuid"
    STRING = "string"  # short text (names, titles)
    TEXT = "text"  # long text
    INTEGER = "integer"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    ENUM = "enum"
    JSON = "json"


class FieldSpec(BaseModel):
    """Declaration of a single entity field."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType
    required: bool = False
    primary_key: bool = False
    auto: Literal["create", "update"] | None = None  # timestamp stamped on create, or on create and update
    default: str | int | bool | None = None
    values: tuple[str, ...] = ()  # enum domain
    min_length: int | None = None
    max_length: int | None = None
    not_empty: bool = False
    pattern: str | None = None
    choices: tuple[int, ...] = ()  # allowed integers

    @property
    def nullable(self) -> bool:
        """Whether the column may hold NULL."""
        return not (self.required or self.primary_key or self.auto)


class TypeCapabilities(Protocol):
    """Maps logical field declarations to backend column definitions."""

    name: str

    def column(self, spec: FieldSpec) -> Any:
        """Return the backend column definition for a field."""
        ...


def _sql_literal(value: str | int | bool) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    return "'" + value.replace("'", "''") + "'"


def _quote(identifier: str) -> str:
    return f'"{identifier}"'


class SQLiteTypes:
    """Emits SQLite column definitions (used inside CREATE TABLE)."""

    name = "sqlite"

    type_map: ClassVar[dict[FieldType, str]] = {
        FieldType.UUID: "TEXT",
        FieldType.STRING: "TEXT",
        FieldType.TEXT: "TEXT",
        FieldType.INTEGER: "INTEGER",
        FieldType.BOOLEAN: "INTEGER",
        FieldType.TIMESTAMP: "TEXT",
        FieldType.ENUM: "TEXT",
        FieldType.JSON: "TEXT",
    }

    def column(self, spec: FieldSpec) -> str:
        """Return e.g. '"status" TEXT DEFAULT 'assigned' CHECK ("status" IN (...))'."""
        try:
            sql_type = self.type_map[spec.type]
        except KeyError as e:
            msg = f"SQLite has no column type for {spec.type!s} (field '{spec.name}')"
            raise SchemaConstructionError(msg) from e

        col = _quote(spec.name)
        parts = [col, sql_type]
        if spec.primary_key:
            parts.append("PRIMARY KEY")
        if not spec.nullable:
            parts.append("NOT NULL")
        if spec.default is not None:
            parts.append(f"DEFAULT {_sql_literal(spec.default)}")

        checks = []
        if spec.type == FieldType.ENUM:
            checks.append(f"{col} IN ({', '.join(_sql_literal(v) for v in spec.values)})")
        if spec.type == FieldType.BOOLEAN:
            checks.append(f"{col} IN (0, 1)")
        if spec.not_empty:
            checks.append(f"trim({col}) != ''")
        if spec.min_length is not None and spec.max_length is not None:
            checks.append(f"length({col}) BETWEEN {spec.min_length} AND {spec.max_length}")
        elif spec.min_length is not None:
            checks.append(f"length({col}) >= {spec.min_length}")
        elif spec.max_length is not None:
            checks.append(f"length({col}) <= {spec.max_length}")
        if spec.choices:
            checks.append(f"{col} IN ({', '.join(str(c) for c in spec.choices)})")

        parts.extend(f"CHECK ({check})" for check in checks)
        return " ".join(parts)


class PocketBaseTypes:
    """Emits PocketBase field definitions (v0.23+ flattened field options)."""

    name = "pocketbase"

    type_map: ClassVar[dict[FieldType, str]] = {
        FieldType.UUID: "text",
        FieldType.STRING: "text",
        FieldType.TEXT: "text",
        FieldType.INTEGER: "number",
        FieldType.BOOLEAN: "bool",
        FieldType.TIMESTAMP: "date",
        FieldType.ENUM: "select",
        FieldType.JSON: "json",
    }

    _UUID_PATTERN = r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"

    def column(self, spec: FieldSpec) -> dict[str, Any]:
        """Return a PocketBase field dict for the collection payload."""
        if spec.auto is not None:
            return {
                "name": spec.name,
                "type": "autodate",
                "system": False,
                "onCreate": True,
                "onUpdate": spec.auto == "update",
            }

        try:
            pb_type = self.type_map[spec.type]
        except KeyError as e:
            msg = f"PocketBase has no field type for {spec.type!s} (field '{spec.name}')"
            raise SchemaConstructionError(msg) from e

        field: dict[str, Any] = {"name": spec.name, "type": pb_type, "required": spec.required}

        if spec.primary_key:
            field.update({"primaryKey": True, "system": True, "required": True})
        if spec.type == FieldType.UUID:
            field["pattern"] = self._UUID_PATTERN
        if spec.type == FieldType.ENUM:
            field.update({"values": list(spec.values), "maxSelect": 1})
        if spec.type == FieldType.INTEGER:
            # PocketBase treats 0 as blank for required number fields
            field.update({"required": False, "onlyInt": True})
        if spec.type == FieldType.BOOLEAN:
            # PocketBase treats False as blank for required bool fields
            field["required"] = False
        if spec.min_length is not None:
            field["min"] = spec.min_length
        if spec.max_length is not None:
            field["max"] = spec.max_length
        if spec.pattern is not None:
            field["pattern"] = spec.pattern

        return field
