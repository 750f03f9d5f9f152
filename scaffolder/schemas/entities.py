from __future__ import annotations
from enum import Enum
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, field_validator

# Annotation property values: string, number, boolean or a flat sequence of those.
AnnotationScalar = Union[StrictBool, StrictInt, StrictFloat, StrictStr]
AnnotationValue = Union[AnnotationScalar, List[AnnotationScalar]]
AnnotationMap = Dict[str, Dict[str, AnnotationValue]]


class RepositoryKind(str, Enum):
    CRUD = "crud"
    BASIC = "basic"
    CUSTOM = "custom"


class RelationKind(str, Enum):
    MANY_TO_ONE = "many-to-one"
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"

    @property
    def annotation(self) -> str:
        return {
            RelationKind.MANY_TO_ONE: "ManyToOne",
            RelationKind.ONE_TO_ONE: "OneToOne",
            RelationKind.ONE_TO_MANY: "OneToMany",
            RelationKind.MANY_TO_MANY: "ManyToMany",
        }[self]

    @property
    def is_collection(self) -> bool:
        return self in (RelationKind.ONE_TO_MANY, RelationKind.MANY_TO_MANY)


class GenerationStrategy(str, Enum):
    AUTO = "AUTO"
    IDENTITY = "IDENTITY"
    SEQUENCE = "SEQUENCE"
    TABLE = "TABLE"
    UUID = "UUID"


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class FieldDescriptor(_Descriptor):
    name: StrictStr = Field(min_length=1)
    type: StrictStr = Field(min_length=1)
    is_id: bool = Field(default=False, alias="isId")
    annotations: AnnotationMap = Field(default_factory=dict)
    generated_value: Optional[GenerationStrategy] = Field(default=None, alias="generatedValue")

    @field_validator("annotations", mode="before")
    @classmethod
    def _normalize_annotations(cls, value):
        # ["jakarta.validation.constraints.NotNull"] and {"...NotNull": null} both mean no properties
        if isinstance(value, list):
            return {name: {} for name in value}
        if isinstance(value, dict):
            return {name: (props if props is not None else {}) for name, props in value.items()}
        return value

    @field_validator("generated_value", mode="before")
    @classmethod
    def _upper_strategy(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value


class RelationDescriptor(_Descriptor):
    name: StrictStr = Field(min_length=1)
    target: StrictStr = Field(min_length=1)
    kind: RelationKind = RelationKind.MANY_TO_ONE
    mapped_by: Optional[str] = Field(default=None, alias="mappedBy")


class EntityDescriptor(_Descriptor):
    name: StrictStr = Field(min_length=1)
    table_name: Optional[str] = Field(default=None, alias="tableName")
    fields: List[FieldDescriptor] = Field(min_length=1)
    repository_kind: RepositoryKind = Field(default=RepositoryKind.CRUD, alias="repository")
    relations: List[RelationDescriptor] = Field(default_factory=list)

    @field_validator("repository_kind", mode="before")
    @classmethod
    def _lower_kind(cls, value):
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("fields")
    @classmethod
    def _single_identifier(cls, fields: List[FieldDescriptor]) -> List[FieldDescriptor]:
        ids = [f.name for f in fields if f.is_id]
        if len(ids) > 1:
            raise ValueError(f"only one field may be marked isId, found {', '.join(ids)}")
        names = [f.name for f in fields]
        duplicated = sorted({n for n in names if names.count(n) > 1})
        if duplicated:
            raise ValueError(f"duplicated field names: {', '.join(duplicated)}")
        return fields


class ProjectCoordinates(_Descriptor):
    group_id: StrictStr
    artifact_id: StrictStr
