"""
Base Document Schema

Every resource stored by the API is described by a ResourceSchema built with
create_schema(). The schema owns the field rules (types, required, unique,
enum, pattern), the common fields every document carries (isActive and the
createdAt/updatedAt timestamps) and the output transform applied before a
document leaves the service.

The database itself is schemaless, so this module is where documents are
cast and checked before an insert or an update is sent to it. Unique fields
are enforced by unique indexes (see database.ensure_indexes).
"""
import re
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from bson import ObjectId
from pydantic import TypeAdapter, ValidationError

from crudforge.core.exceptions import DocumentValidationError, InvalidIdentifierError
from crudforge.utils.naming import pluralize, to_snake_case

ID_FIELD = "_id"
PUBLIC_ID_FIELD = "id"
VERSION_KEY = "__v"
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FieldSpec:
    """
    Storage rules for one document field.

    `default` may be a value or a zero-argument callable. Fields with
    `select=False` are write-only: they are stored but never returned.
    `match` is a (regex, message) pair checked against string values.
    """

    type: Any = str
    required: bool = False
    unique: bool = False
    default: Any = None
    enum: Optional[Sequence[Any]] = None
    match: Optional[Tuple[str, str]] = None
    select: bool = True
    ref: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def default_value(self) -> Any:
        if callable(self.default):
            return self.default()
        return deepcopy(self.default)

    def cast(self, path: str, value: Any) -> Any:
        """Cast a raw value to the field type, raising InvalidIdentifierError on failure."""
        if self.type is ObjectId:
            return cast_object_id(path, value)
        try:
            return _adapter(self.type).validate_python(value)
        except ValidationError:
            raise InvalidIdentifierError(path, value, kind=_type_name(self.type))


_ADAPTERS: Dict[Any, TypeAdapter] = {}


def _adapter(annotation: Any) -> TypeAdapter:
    adapter = _ADAPTERS.get(annotation)
    if adapter is None:
        adapter = _ADAPTERS[annotation] = TypeAdapter(annotation)
    return adapter


def _type_name(annotation: Any) -> str:
    names = {str: "String", float: "Number", int: "Number", bool: "Boolean",
             datetime: "Date", dict: "Object", list: "Array"}
    return names.get(annotation, getattr(annotation, "__name__", "Array"))


def cast_object_id(path: str, value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise InvalidIdentifierError(path, value)


def _cast_ids(path: str, value: Any) -> Any:
    # Handles plain ids, lists of ids and operator documents like {"$in": [...]}
    if isinstance(value, dict):
        return {key: _cast_ids(path, item) for key, item in value.items()}
    if isinstance(value, list):
        return [_cast_ids(path, item) for item in value]
    return cast_object_id(path, value)


class ResourceSchema:
    """Field rules, lifecycle hooks and output transform for one resource type."""

    def __init__(
        self,
        name: str,
        fields: Dict[str, FieldSpec],
        timestamps: bool = True,
        collection: Optional[str] = None,
    ):
        self.name = name
        self.fields = fields
        self.timestamps = timestamps
        self.collection_name = collection or pluralize(to_snake_case(name))
        self._pre_save: List[Callable[[dict], Any]] = []

    def __repr__(self):
        return f"<ResourceSchema {self.name} collection={self.collection_name}>"

    @property
    def unique_fields(self) -> List[str]:
        return [name for name, spec in self.fields.items() if spec.unique]

    @property
    def hidden_fields(self) -> List[str]:
        return [name for name, spec in self.fields.items() if not spec.select]

    def pre_save(self, hook: Callable[[dict], Any]) -> Callable[[dict], Any]:
        """Register a hook run on every prepared insert. Usable as a decorator."""
        self._pre_save.append(hook)
        return hook

    # -- Writes ------------------------------------------------------------

    def prepare_insert(self, payload: Mapping[str, Any]) -> dict:
        """
        Turn a request payload into a document ready to insert.

        Unknown keys are dropped and values are cast. Defaults fill in missing
        keys and explicit Nones. Every field rule is checked and all failures
        are collected into a single DocumentValidationError.
        """
        document: Dict[str, Any] = {}
        errors: Dict[str, str] = {}

        for name, spec in self.fields.items():
            if payload.get(name) is not None:
                value = payload[name]
            elif spec.has_default:
                value = spec.default_value()
            else:
                value = None
                if not spec.required:
                    continue

            value, message = self._check(name, spec, value)
            if message:
                errors[name] = message
            else:
                document[name] = value

        if errors:
            raise DocumentValidationError(errors)

        if self.timestamps:
            now = utcnow()
            document[CREATED_AT] = now
            document[UPDATED_AT] = now
        document[VERSION_KEY] = 0

        for hook in self._pre_save:
            hook(document)
        return document

    def prepare_update(self, partial: Mapping[str, Any]) -> dict:
        """
        Validate a partial update.

        Only the supplied fields are checked; unknown keys are dropped. A None
        on a field with a default resets it to the default.
        Returns the `$set` document, with updatedAt refreshed.
        """
        changes: Dict[str, Any] = {}
        errors: Dict[str, str] = {}

        for name, value in partial.items():
            spec = self.fields.get(name)
            if spec is None:
                continue
            if value is None and spec.has_default:
                value = spec.default_value()
            value, message = self._check(name, spec, value)
            if message:
                errors[name] = message
            else:
                changes[name] = value

        if errors:
            raise DocumentValidationError(errors)

        if self.timestamps:
            changes[UPDATED_AT] = utcnow()
        return changes

    def _check(self, name: str, spec: FieldSpec, value: Any) -> Tuple[Any, Optional[str]]:
        if value is None or (value == "" and spec.type is str and spec.required):
            if spec.required:
                return value, f"Path `{name}` is required."
            return value, None

        try:
            value = spec.cast(name, value)
        except InvalidIdentifierError as exc:
            return value, str(exc)

        if spec.enum is not None and value not in spec.enum:
            return value, f"`{value}` is not a valid enum value for path `{name}`."

        if spec.match is not None and isinstance(value, str):
            pattern, message = spec.match
            if not re.search(pattern, value):
                return value, message or f"Path `{name}` is invalid ({value})."

        return value, None

    # -- Reads -------------------------------------------------------------

    def cast_id(self, value: Any) -> ObjectId:
        return cast_object_id(ID_FIELD, value)

    def cast_filter(self, filter_: Mapping[str, Any]) -> dict:
        """Cast identifier and reference values in a client filter to ObjectIds."""
        cast = dict(filter_)
        for key in (PUBLIC_ID_FIELD, ID_FIELD):
            if key in cast:
                cast[ID_FIELD] = _cast_ids(ID_FIELD, cast.pop(key))
        for name, spec in self.fields.items():
            if spec.type is ObjectId and name in cast:
                cast[name] = _cast_ids(name, cast[name])
        return cast

    def to_public(self, document: Optional[Mapping[str, Any]]) -> Optional[dict]:
        """
        Output transform applied to every document leaving the service.

        Renames `_id` to `id`, drops the version key and write-only fields.
        Applying it twice gives the same result.
        """
        if document is None:
            return None
        public = dict(document)
        if ID_FIELD in public:
            identifier = str(public.pop(ID_FIELD))
            public.pop(PUBLIC_ID_FIELD, None)
            public = {PUBLIC_ID_FIELD: identifier, **public}
        public.pop(VERSION_KEY, None)
        for name in self.hidden_fields:
            public.pop(name, None)
        return public


def base_fields() -> Dict[str, FieldSpec]:
    """Fields every resource carries."""
    return {
        "isActive": FieldSpec(bool, default=True),
    }


def create_schema(
    name: str,
    fields: Optional[Dict[str, FieldSpec]] = None,
    options: Optional[Dict[str, Any]] = None,
) -> ResourceSchema:
    """
    Create a resource schema from the common fields plus model-specific ones.

    Model-specific fields win on a name collision. `options` accepts
    `collection` (override the collection name) and `timestamps` (bool).
    """
    options = options or {}
    merged = {**base_fields(), **(fields or {})}
    return ResourceSchema(
        name,
        merged,
        timestamps=options.get("timestamps", True),
        collection=options.get("collection"),
    )
