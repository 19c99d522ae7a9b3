"""Entity schema registry (code-first declarations of persisted entities).

Each `define_*` function takes a type capability object and returns the
EntitySchema descriptor for one entity kind. `init_registry` builds all of them
once at startup; the resulting registry is passed to whatever needs it.
"""

import json
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.config import constants
from src.core.errors import SchemaConstructionError, translate_validation_error
from src.core.field_types import FieldSpec, FieldType, SQLiteTypes, TypeCapabilities
from src.core.logging import span
from src.domain.collection import Collection
from src.domain.goal import Goal, GoalStatus, GoalType
from src.domain.record import Record, utc_now
from src.domain.task import DifficultyLevel, RecurringFrequency, Task, TaskStatus


logger = logging.getLogger(__name__)


# Fields every entity carries
ID_FIELD = FieldSpec(name="id", type=FieldType.UUID, primary_key=True)
CREATED_AT_FIELD = FieldSpec(name="createdAt", type=FieldType.TIMESTAMP, auto="create")
UPDATED_AT_FIELD = FieldSpec(name="updatedAt", type=FieldType.TIMESTAMP, auto="update")

_PROTECTED_COLUMNS = frozenset({ID_FIELD.name, CREATED_AT_FIELD.name, UPDATED_AT_FIELD.name})


def values_of(enum_cls: type[StrEnum]) -> tuple[str, ...]:
    """Return the literal values of a closed enumeration."""
    return tuple(member.value for member in enum_cls)


def _next_timestamp(previous: datetime) -> datetime:
    """Return now, nudged past `previous` so updatedAt always moves forward."""
    now = utc_now()
    return now if now > previous else previous + timedelta(microseconds=1)


class EntitySchema:
    """Schema descriptor for one entity kind.

    Holds the ordered field declarations, the backend column definition of each
    field (as produced by the capability object) and the record model that
    enforces the declared rules.
    """

    def __init__(
        self,
        *,
        entity: str,
        table: str,
        model: type[Record],
        fields: Iterable[FieldSpec],
        types: TypeCapabilities,
    ) -> None:
        self.entity = entity
        self.table = table
        self.model = model
        self.types = types
        self.fields: tuple[FieldSpec, ...] = (ID_FIELD, *fields, CREATED_AT_FIELD, UPDATED_AT_FIELD)
        self._column_by_attr = {name: info.alias or name for name, info in model.model_fields.items()}

        self._check_declaration()
        self.columns: dict[str, Any] = {spec.name: self._map_column(spec) for spec in self.fields}

    def __repr__(self) -> str:
        return f"EntitySchema(entity={self.entity!r}, table={self.table!r}, backend={self.types.name!r})"

    @property
    def field_names(self) -> list[str]:
        """Storage column names in declaration order."""
        return [spec.name for spec in self.fields]

    @property
    def enum_values(self) -> dict[str, tuple[str, ...]]:
        """Enum domains keyed by column name."""
        return {spec.name: spec.values for spec in self.fields if spec.type == FieldType.ENUM}

    def field(self, name: str) -> FieldSpec:
        """Return the declaration of a field by storage name."""
        for spec in self.fields:
            if spec.name == name:
                return spec
        msg = f"{self.entity} has no field '{name}'"
        raise KeyError(msg)

    def _fail(self, message: str) -> SchemaConstructionError:
        return SchemaConstructionError(f"{self.entity}: {message}", entity=self.entity)

    def _normalize(self, data: Mapping[str, Any] | None, extra: Mapping[str, Any]) -> dict[str, Any]:
        """Merge inputs and key them by column name."""
        return {self._column_by_attr.get(key, key): value for key, value in {**(data or {}), **extra}.items()}

    def _drop_protected(self, requested: dict[str, Any]) -> dict[str, Any]:
        ignored = sorted(_PROTECTED_COLUMNS & requested.keys())
        if ignored:
            logger.warning("Ignoring values for auto-managed fields", extra={"entity": self.entity, "fields": ignored})
        return {key: value for key, value in requested.items() if key not in _PROTECTED_COLUMNS}

    def _check_declaration(self) -> None:  # noqa: C901
        """Reject defective declarations before anything uses them."""
        seen: set[str] = set()
        for spec in self.fields:
            if spec.name in seen:
                raise self._fail(f"duplicate field '{spec.name}'")
            seen.add(spec.name)

            if spec.type == FieldType.ENUM and not spec.values:
                raise self._fail(f"enum field '{spec.name}' declares no values")
            if spec.type != FieldType.ENUM and spec.values:
                raise self._fail(f"field '{spec.name}' declares values but is not an enum")
            if spec.type == FieldType.ENUM and spec.default is not None and spec.default not in spec.values:
                raise self._fail(f"default {spec.default!r} of '{spec.name}' is not one of its values")
            if spec.choices and spec.type != FieldType.INTEGER:
                raise self._fail(f"field '{spec.name}' declares integer choices but is not an integer")
            if spec.min_length is not None and spec.max_length is not None and spec.min_length > spec.max_length:
                raise self._fail(f"min_length of '{spec.name}' exceeds its max_length")

        model_columns = set(self._column_by_attr.values())
        if seen != model_columns:
            missing = sorted(model_columns - seen)
            extra = sorted(seen - model_columns)
            raise self._fail(f"fields do not match {self.model.__name__} (undeclared: {missing}, unknown: {extra})")

        attr_by_column = {column: attr for attr, column in self._column_by_attr.items()}
        for spec in self.fields:
            if spec.primary_key or spec.auto:
                continue
            info = self.model.model_fields[attr_by_column[spec.name]]
            if spec.required != info.is_required():
                raise self._fail(f"required flag of '{spec.name}' disagrees with {self.model.__name__}")

    def _map_column(self, spec: FieldSpec) -> Any:
        try:
            return self.types.column(spec)
        except SchemaConstructionError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            msg = f"{self.types.name} cannot map field '{spec.name}' of type {spec.type!s}"
            raise self._fail(msg) from e

    def _validate(self, payload: Mapping[str, Any]) -> Record:
        # null counts as absent for required fields
        required = {spec.name for spec in self.fields if spec.required}
        payload = {key: value for key, value in payload.items() if value is not None or key not in required}
        try:
            return self.model.model_validate(payload)
        except PydanticValidationError as e:
            error = translate_validation_error(e, entity=self.entity, allowed_values=self.enum_values)
            logger.debug("Record rejected", extra={"entity": self.entity, "field": error.field, "error": str(error)})
            raise error from e

    def build(self, data: Mapping[str, Any] | None = None, **fields: Any) -> Record:
        """Construct a validated record with a generated id and fresh timestamps.

        Values given for id, createdAt or updatedAt are ignored; use from_row()
        to load stored records.

        Args:
            data: Field values keyed by column or attribute name
            **fields: More field values (override `data`)

        Raises:
            SchemaConstructionError: A required field is missing
            DomainError: An enum field holds a value outside its set
            ValidationError: Any other rule is violated
        """
        return self._validate(self._drop_protected(self._normalize(data, fields)))

    def update(self, record: Record, data: Mapping[str, Any] | None = None, **changes: Any) -> Record:
        """Return a copy of `record` with `changes` applied and revalidated.

        id and createdAt are never changed; updatedAt moves forward.
        """
        merged = record.model_dump(by_alias=True)
        merged.update(self._drop_protected(self._normalize(data, changes)))
        merged[UPDATED_AT_FIELD.name] = _next_timestamp(record.updated_at)
        return self._validate(merged)

    def to_row(self, record: Record) -> dict[str, Any]:
        """Flatten a record into a storage row keyed by column name."""
        dumped = record.model_dump(mode="json", by_alias=True)
        row: dict[str, Any] = {}
        for spec in self.fields:
            value = dumped.get(spec.name)
            if value is not None and spec.type == FieldType.JSON:
                value = json.dumps(value)
            elif value is not None and spec.type == FieldType.BOOLEAN:
                value = int(value)
            row[spec.name] = value
        return row

    def from_row(self, row: Mapping[str, Any]) -> Record:
        """Rebuild a record from a storage row."""
        payload = dict(row)
        for spec in self.fields:
            value = payload.get(spec.name)
            if isinstance(value, str) and spec.type == FieldType.JSON:
                payload[spec.name] = json.loads(value)
        return self._validate(payload)

    def create_table_sql(self) -> str:
        """Return the CREATE TABLE statement for SQL capability objects."""
        if not all(isinstance(column, str) for column in self.columns.values()):
            msg = f"{self.types.name} does not produce SQL column definitions"
            raise TypeError(msg)
        columns = ",\n    ".join(self.columns.values())
        return f'CREATE TABLE IF NOT EXISTS "{self.table}" (\n    {columns}\n)'

    def to_collection(self) -> dict[str, Any]:
        """Return a PocketBase collection payload for dict-producing capability objects.

        API rules are left as None (superuser only); access control belongs to the API layer.
        """
        if not all(isinstance(column, dict) for column in self.columns.values()):
            msg = f"{self.types.name} does not produce collection field definitions"
            raise TypeError(msg)
        return {
            "name": self.table,
            "type": "base",
            "system": False,
            "listRule": None,
            "viewRule": None,
            "createRule": None,
            "updateRule": None,
            "deleteRule": None,
            "fields": list(self.columns.values()),
        }


def define_task(types: TypeCapabilities) -> EntitySchema:
    """Declare the Task entity."""
    return EntitySchema(
        entity="Task",
        table="Tasks",
        model=Task,
        types=types,
        fields=[
            FieldSpec(name="title", type=FieldType.STRING, required=True),
            FieldSpec(name="description", type=FieldType.TEXT),
            FieldSpec(name="coinReward", type=FieldType.INTEGER, required=True),
            FieldSpec(
                name="difficultyLevel",
                type=FieldType.ENUM,
                required=True,
                values=values_of(DifficultyLevel),
            ),
            FieldSpec(
                name="status",
                type=FieldType.ENUM,
                values=values_of(TaskStatus),
                default=TaskStatus.ASSIGNED.value,
            ),
            FieldSpec(name="statusReason", type=FieldType.TEXT),
            FieldSpec(name="dueDate", type=FieldType.TIMESTAMP),
            FieldSpec(name="dueTime", type=FieldType.STRING, pattern=constants.TASK_DUE_TIME_PATTERN),
            FieldSpec(name="duration", type=FieldType.INTEGER, choices=constants.TASK_DURATION_CHOICES),
            FieldSpec(name="isRecurring", type=FieldType.BOOLEAN, default=False),
            FieldSpec(name="recurringFrequency", type=FieldType.ENUM, values=values_of(RecurringFrequency)),
            FieldSpec(name="parentTaskId", type=FieldType.UUID),
            FieldSpec(name="completedAt", type=FieldType.TIMESTAMP),
        ],
    )


def define_goal(types: TypeCapabilities) -> EntitySchema:
    """Declare the Goal entity."""
    return EntitySchema(
        entity="Goal",
        table="Goals",
        model=Goal,
        types=types,
        fields=[
            FieldSpec(
                name="title",
                type=FieldType.STRING,
                required=True,
                not_empty=True,
                min_length=constants.GOAL_TITLE_MIN_LENGTH,
                max_length=constants.GOAL_TITLE_MAX_LENGTH,
            ),
            FieldSpec(name="description", type=FieldType.TEXT),
            FieldSpec(name="image", type=FieldType.JSON),
            FieldSpec(name="type", type=FieldType.ENUM, required=True, values=values_of(GoalType)),
            FieldSpec(
                name="status",
                type=FieldType.ENUM,
                values=values_of(GoalStatus),
                default=GoalStatus.PENDING.value,
            ),
            FieldSpec(name="completedAt", type=FieldType.TIMESTAMP),
            FieldSpec(name="approvedAt", type=FieldType.TIMESTAMP),
            FieldSpec(name="rejectedAt", type=FieldType.TIMESTAMP),
            FieldSpec(name="rejectionReason", type=FieldType.TEXT),
        ],
    )


def define_collection(types: TypeCapabilities) -> EntitySchema:
    """Declare the product Collection entity."""
    return EntitySchema(
        entity="Collection",
        table="Collections",
        model=Collection,
        types=types,
        fields=[
            FieldSpec(name="name", type=FieldType.STRING, required=True),
            FieldSpec(name="image", type=FieldType.JSON),
            FieldSpec(name="description", type=FieldType.TEXT),
            FieldSpec(name="seo_title", type=FieldType.STRING),
            FieldSpec(name="seo_description", type=FieldType.TEXT),
            FieldSpec(name="is_active", type=FieldType.BOOLEAN, default=True),
        ],
    )


# Every entity kind, in registration order
ENTITY_DEFINITIONS: tuple[Callable[[TypeCapabilities], EntitySchema], ...] = (
    define_task,
    define_goal,
    define_collection,
)


class SchemaRegistry:
    """Entity schemas of one backend, keyed by entity name."""

    def __init__(self, schemas: Iterable[EntitySchema] = ()) -> None:
        self._schemas: dict[str, EntitySchema] = {}
        for schema in schemas:
            self.register(schema)

    def register(self, schema: EntitySchema) -> None:
        """Add a schema.

        Raises:
            SchemaConstructionError: If the entity or table name is already registered
        """
        if schema.entity in self._schemas:
            msg = f"Entity '{schema.entity}' is already registered"
            raise SchemaConstructionError(msg, entity=schema.entity)
        if any(existing.table == schema.table for existing in self._schemas.values()):
            msg = f"Table '{schema.table}' is already registered"
            raise SchemaConstructionError(msg, entity=schema.entity)
        self._schemas[schema.entity] = schema

    def __getitem__(self, entity: str) -> EntitySchema:
        try:
            return self._schemas[entity]
        except KeyError:
            msg = f"Unknown entity '{entity}'. Registered: {', '.join(self._schemas)}"
            raise KeyError(msg) from None

    def __contains__(self, entity: object) -> bool:
        return entity in self._schemas

    def __iter__(self) -> Iterator[EntitySchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)

    def get(self, entity: str) -> EntitySchema | None:
        """Get a schema by entity name, or None."""
        return self._schemas.get(entity)

    def names(self) -> list[str]:
        """Registered entity names in registration order."""
        return list(self._schemas)

    @property
    def task(self) -> EntitySchema:
        return self["Task"]

    @property
    def goal(self) -> EntitySchema:
        return self["Goal"]

    @property
    def collection(self) -> EntitySchema:
        return self["Collection"]


def init_registry(types: TypeCapabilities | None = None) -> SchemaRegistry:
    """Build every entity schema for one backend.

    Call once from the startup sequence and pass the registry on.

    Args:
        types: Capability object mapping field types to columns (defaults to SQLite)

    Raises:
        SchemaConstructionError: If any declaration is defective
    """
    types = types or SQLiteTypes()
    with span("schema.init_registry"):
        registry = SchemaRegistry(define(types) for define in ENTITY_DEFINITIONS)
        logger.info("Entity schemas registered", extra={"entities": registry.names(), "backend": types.name})
        return registry
