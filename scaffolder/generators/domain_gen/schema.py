"""Parsing of the entity definition document."""
import json
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from scaffolder.core.errors import SchemaError
from scaffolder.schemas.entities import EntityDescriptor, FieldDescriptor

DEFAULT_ID_NAME = "id"
DEFAULT_ID_TYPE = "Long"


def load_schema_document(json_text: str) -> List[Dict[str, Any]]:
    """
    Validate the document shape and return the raw entity objects.

    Accepts either ``{"entities": [...]}`` or a single entity object.
    Every problem found here is fatal for the whole run.
    """
    try:
        document = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Entity definitions are not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise SchemaError("Entity definitions must be a JSON object")

    if "entities" in document:
        entities = document["entities"]
        if not isinstance(entities, list):
            raise SchemaError("'entities' must be an array of entity objects")
        return entities

    return [document]


def _entity_label(raw: Any, position: int) -> str:
    if isinstance(raw, dict) and isinstance(raw.get("name"), str) and raw["name"]:
        return raw["name"]
    return f"entity #{position}"


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "entity"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def parse_entity(raw: Any, position: int = 1) -> EntityDescriptor:
    """Validate one raw entity object. ``position`` is 1-based and only used in messages."""
    label = _entity_label(raw, position)
    if not isinstance(raw, dict):
        raise SchemaError(f"{label}: entity definition must be an object", entity=label)
    if not raw.get("fields"):
        raise SchemaError(f"{label}: 'fields' is missing or empty", entity=label)
    for index, field in enumerate(raw["fields"] if isinstance(raw["fields"], list) else [], start=1):
        if not isinstance(field, dict):
            raise SchemaError(f"{label}: field #{index} must be an object", entity=label)
        for key in ("name", "type"):
            if not field.get(key):
                field_label = field.get("name") or f"#{index}"
                raise SchemaError(f"{label}: field {field_label} lacks '{key}'", entity=label)
    try:
        return EntityDescriptor.model_validate(raw)
    except ValidationError as e:
        raise SchemaError(f"{label}: {_describe(e)}", entity=label) from e


def parse_entities(json_text: str) -> List[EntityDescriptor]:
    """Strictly parse every entity; the first malformed one raises SchemaError."""
    entities = []
    seen = set()
    for position, raw in enumerate(load_schema_document(json_text), start=1):
        entity = parse_entity(raw, position)
        if entity.name in seen:
            raise SchemaError(f"{entity.name}: duplicated entity name", entity=entity.name)
        seen.add(entity.name)
        entities.append(entity)
    return entities


def get_identifier_field(entity: EntityDescriptor) -> Optional[FieldDescriptor]:
    """Return the first field marked as identifier, in declaration order."""
    return next((f for f in entity.fields if f.is_id), None)


def resolve_identifier(entity: EntityDescriptor) -> FieldDescriptor:
    """
    Return the identifier field, synthesizing ``Long id`` when none is marked.

    An unmarked field literally named ``id`` is promoted rather than duplicated.
    """
    field = get_identifier_field(entity)
    if field is not None:
        return field
    existing = next((f for f in entity.fields if f.name == DEFAULT_ID_NAME), None)
    if existing is not None:
        return existing.model_copy(update={"is_id": True})
    return FieldDescriptor(name=DEFAULT_ID_NAME, type=DEFAULT_ID_TYPE, is_id=True)


def fields_with_identifier(entity: EntityDescriptor) -> List[FieldDescriptor]:
    """Entity fields in declaration order with the resolved identifier in place (or first)."""
    identifier = resolve_identifier(entity)
    fields = [identifier if f.name == identifier.name else f for f in entity.fields]
    if not any(f.name == identifier.name for f in entity.fields):
        fields.insert(0, identifier)
    return fields
