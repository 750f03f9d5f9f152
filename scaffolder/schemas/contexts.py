"""Render contexts, one closed model per template kind."""
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from scaffolder.schemas.entities import AnnotationValue


class _Context(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class AnnotationSpec(_Context):
    name: str  # qualified, e.g. jakarta.persistence.Column
    properties: Dict[str, AnnotationValue] = Field(default_factory=dict)


class FieldContext(_Context):
    name: str
    type: str
    capitalized: str
    is_id: bool = False
    generation: Optional[str] = None
    annotations: List[AnnotationSpec] = Field(default_factory=list)


class RelationContext(_Context):
    name: str
    type: str
    capitalized: str
    annotation: str
    mapped_by: Optional[str] = None


class EntityContext(_Context):
    package_name: str
    class_name: str
    table_name: Optional[str] = None
    imports: List[str]
    fields: List[FieldContext]
    relations: List[RelationContext] = Field(default_factory=list)


class RepositoryContext(_Context):
    package_name: str
    class_name: str
    entity_name: str
    id_type: str
    imports: List[str]
    base_interface: Optional[str] = None
    crud_operations: bool = True


class RepositoryImplContext(_Context):
    package_name: str
    class_name: str
    interface_name: str
    entity_name: str
    id_type: str
    id_getter: str
    id_primitive: bool = False  # unsaved entities then carry 0, not null
    imports: List[str]
    crud_operations: bool = True


class ModelContext(_Context):
    package_name: str
    class_name: str
    imports: List[str]
    fields: List[FieldContext]


class MapperContext(_Context):
    package_name: str
    class_name: str
    entity_name: str
    model_name: str
    imports: List[str]
    ignored_on_entity: List[str] = Field(default_factory=list)


class ServiceContext(_Context):
    package_name: str
    class_name: str
    entity_name: str
    model_name: str
    repository_name: str
    mapper_name: str
    id_type: str
    imports: List[str]
    crud_operations: bool = True


class ManagedBeanContext(_Context):
    package_name: str
    class_name: str
    model_name: str
    service_name: str
    id_getter: str
    imports: List[str]
    crud_operations: bool = True


class CrudViewContext(_Context):
    template_name: str
    define: str
    title: str
    bean_name: str
    id_field: str
    fields: List[str]


class JavaBeanContext(_Context):
    package_name: str
    class_name: str
    imports: List[str] = Field(default_factory=list)
    annotations: List[AnnotationSpec] = Field(default_factory=list)
    fields: List[FieldContext] = Field(default_factory=list)


class FaceTemplateContext(_Context):
    title: str
    inserts: List[str]


class FacePageContext(_Context):
    title: str
    template_name: Optional[str] = None
    bean_name: Optional[str] = None
    inserts: List[str] = Field(default_factory=list)


class FormFieldContext(_Context):
    name: str
    label: str
    component: str  # PrimeFaces input tag, e.g. inputNumber


class FormPageContext(_Context):
    title: str
    form_id: str
    bean_name: str
    fields: List[FormFieldContext]
    template_name: Optional[str] = None
    define: str = "content"
    crud_operations: bool = True
