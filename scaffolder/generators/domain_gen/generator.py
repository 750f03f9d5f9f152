"""Orchestrator for domain-model code generation."""
import logging
from pathlib import Path
from typing import Dict, List, Optional
from scaffolder.generators.domain_gen.naming import (
    Layer,
    boxed,
    capitalize,
    entity_class_name,
    getter_name,
    imports_for_types,
    java_path,
    managed_bean_class_name,
    mapper_class_name,
    model_class_name,
    package_set,
    qualified,
    repository_class_name,
    service_class_name,
    uncapitalize,
    view_name,
)
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.repository import RepositoryBuilder
from scaffolder.generators.domain_gen.schema import fields_with_identifier, parse_entities, resolve_identifier
from scaffolder.generators.domain_gen.types import GeneratedFile, GenerationOptions, WriteResult
from scaffolder.generators.domain_gen.writer import write_files
from scaffolder.schemas.contexts import (
    AnnotationSpec,
    CrudViewContext,
    EntityContext,
    FieldContext,
    ManagedBeanContext,
    MapperContext,
    ModelContext,
    RelationContext,
    ServiceContext,
)
from scaffolder.schemas.entities import EntityDescriptor, FieldDescriptor, ProjectCoordinates, RepositoryKind

log = logging.getLogger(__name__)

# Unqualified annotation names accepted in entity definitions.
KNOWN_ANNOTATIONS = {
    name: f"jakarta.persistence.{name}"
    for name in ("Column", "Lob", "Basic", "Transient", "Version", "Enumerated", "Temporal", "JoinColumn")
}
KNOWN_ANNOTATIONS.update({
    name: f"jakarta.validation.constraints.{name}"
    for name in (
        "NotNull", "NotBlank", "NotEmpty", "Size", "Min", "Max", "Email", "Pattern",
        "Past", "Future", "Positive", "PositiveOrZero", "Negative", "Digits", "DecimalMin", "DecimalMax",
    )
})


def qualify_annotation(name: str) -> str:
    return KNOWN_ANNOTATIONS.get(name, name)


def _field_context(field: FieldDescriptor, with_annotations: bool = True) -> FieldContext:
    generation = None
    if field.is_id and field.generated_value is not None and with_annotations:
        generation = field.generated_value.value
    annotations = []
    if with_annotations:
        annotations = [
            AnnotationSpec(name=qualify_annotation(name), properties=props)
            for name, props in field.annotations.items()
        ]
    return FieldContext(
        name=field.name,
        type=field.type,
        capitalized=capitalize(field.name),
        is_id=field.is_id,
        generation=generation,
        annotations=annotations,
    )


def build_entity_context(entity: EntityDescriptor, package: str) -> EntityContext:
    """Context of the JPA entity class: identifier resolved, imports collected and sorted."""
    fields = [_field_context(f) for f in fields_with_identifier(entity)]
    relations = []
    imports = {"jakarta.persistence.Entity", "jakarta.persistence.Id"}

    if entity.table_name:
        imports.add("jakarta.persistence.Table")
    if any(f.generation for f in fields):
        imports.update({"jakarta.persistence.GeneratedValue", "jakarta.persistence.GenerationType"})
    for f in fields:
        imports.update(a.name for a in f.annotations if "." in a.name)
    imports.update(imports_for_types(f.type for f in fields))

    for relation in entity.relations:
        target = entity_class_name(relation.target)
        java_type = f"List<{target}>" if relation.kind.is_collection else target
        imports.add(f"jakarta.persistence.{relation.kind.annotation}")
        if relation.kind.is_collection:
            imports.add("java.util.List")
        relations.append(RelationContext(
            name=relation.name,
            type=java_type,
            capitalized=capitalize(relation.name),
            annotation=relation.kind.annotation,
            mapped_by=relation.mapped_by,
        ))

    return EntityContext(
        package_name=package,
        class_name=entity_class_name(entity.name),
        table_name=entity.table_name,
        imports=sorted(imports),
        fields=fields,
        relations=relations,
    )


def build_managed_bean(
    renderer: TemplateRenderer,
    entity: EntityDescriptor,
    packages: Dict[Layer, str],
    class_name: Optional[str] = None,
) -> GeneratedFile:
    """View-scoped bean editing ``entity`` through its service; named after the entity by default."""
    package = packages[Layer.FACES]
    model_name = model_class_name(entity.name)
    service_name = service_class_name(entity.name)
    crud = entity.repository_kind is not RepositoryKind.CUSTOM

    imports = {
        "jakarta.annotation.PostConstruct",
        "jakarta.faces.view.ViewScoped",
        "jakarta.inject.Inject",
        "jakarta.inject.Named",
        "java.io.Serializable",
        "java.util.List",
        qualified(packages[Layer.MODEL], model_name),
        qualified(packages[Layer.SERVICE], service_name),
    }
    if not crud:
        imports.add("java.util.ArrayList")
    context = ManagedBeanContext(
        package_name=package,
        class_name=class_name or managed_bean_class_name(entity.name),
        model_name=model_name,
        service_name=service_name,
        id_getter=getter_name(resolve_identifier(entity).name),
        imports=sorted(imports),
        crud_operations=crud,
    )
    return GeneratedFile(
        path=java_path(package, context.class_name),
        content=renderer.render("ManagedBean.java.j2", context),
        layer=Layer.FACES,
        preserve_existing=True,
    )


class ArtifactEmitter:
    """Renders the full artifact set of an entity, in dependency order."""

    def __init__(self, renderer: TemplateRenderer, repository_builder: RepositoryBuilder):
        self.renderer = renderer
        self.repository_builder = repository_builder

    def generate_entity_artifacts(
        self,
        entity: EntityDescriptor,
        coordinates: ProjectCoordinates,
        options: Optional[GenerationOptions] = None,
    ) -> List[GeneratedFile]:
        """
        Render every artifact of one entity.

        Order: entity, repository (and implementation), model, mapper,
        service, managed bean, CRUD view. Nothing is written here.

        Args:
            entity: Validated entity descriptor
            coordinates: Project group/artifact identifiers
            options: Optional artifacts to include

        Returns:
            List of GeneratedFile objects
        """
        options = options or GenerationOptions()
        packages = package_set(coordinates.group_id, coordinates.artifact_id)

        files = [self._entity(entity, packages)]
        files.extend(self.repository_builder.build(self.renderer, entity, packages))
        files.append(self._model(entity, packages))
        files.append(self._mapper(entity, packages))
        files.append(self._service(entity, packages))
        if options.managed_beans:
            files.append(self._managed_bean(entity, packages))
        if options.faces_template:
            files.append(self._crud_view(entity, options))
        return files

    def _entity(self, entity, packages: Dict[Layer, str]) -> GeneratedFile:
        context = build_entity_context(entity, packages[Layer.ENTITY])
        return GeneratedFile(
            path=java_path(context.package_name, context.class_name),
            content=self.renderer.render("Entity.java.j2", context),
            layer=Layer.ENTITY,
        )

    def _model(self, entity, packages) -> GeneratedFile:
        package = packages[Layer.MODEL]
        fields = [_field_context(f, with_annotations=False) for f in fields_with_identifier(entity)]
        context = ModelContext(
            package_name=package,
            class_name=model_class_name(entity.name),
            imports=sorted(imports_for_types(f.type for f in fields)),
            fields=fields,
        )
        return GeneratedFile(
            path=java_path(package, context.class_name),
            content=self.renderer.render("Model.java.j2", context),
            layer=Layer.MODEL,
        )

    def _mapper(self, entity, packages) -> GeneratedFile:
        package = packages[Layer.MAPPER]
        entity_name = entity_class_name(entity.name)
        model_name = model_class_name(entity.name)
        ignored = [r.name for r in entity.relations]
        imports = {
            "org.mapstruct.Mapper",
            "org.mapstruct.MappingConstants",
            qualified(packages[Layer.ENTITY], entity_name),
            qualified(packages[Layer.MODEL], model_name),
        }
        if ignored:
            imports.add("org.mapstruct.Mapping")
        context = MapperContext(
            package_name=package,
            class_name=mapper_class_name(entity.name),
            entity_name=entity_name,
            model_name=model_name,
            imports=sorted(imports),
            ignored_on_entity=ignored,
        )
        return GeneratedFile(
            path=java_path(package, context.class_name),
            content=self.renderer.render("Mapper.java.j2", context),
            layer=Layer.MAPPER,
        )

    def _service(self, entity, packages) -> GeneratedFile:
        package = packages[Layer.SERVICE]
        model_name = model_class_name(entity.name)
        repository_name = repository_class_name(entity.name)
        mapper_name = mapper_class_name(entity.name)
        id_type = boxed(resolve_identifier(entity).type)
        crud = entity.repository_kind is not RepositoryKind.CUSTOM

        imports = {
            "jakarta.enterprise.context.ApplicationScoped",
            "jakarta.inject.Inject",
            "jakarta.transaction.Transactional",
            qualified(packages[Layer.REPOSITORY], repository_name),
            qualified(packages[Layer.MAPPER], mapper_name),
        }
        if crud:
            imports.update({"java.util.List", "java.util.Optional", qualified(packages[Layer.MODEL], model_name)})
            imports.update(imports_for_types([id_type]))
        context = ServiceContext(
            package_name=package,
            class_name=service_class_name(entity.name),
            entity_name=entity_class_name(entity.name),
            model_name=model_name,
            repository_name=repository_name,
            mapper_name=mapper_name,
            id_type=id_type,
            imports=sorted(imports),
            crud_operations=crud,
        )
        return GeneratedFile(
            path=java_path(package, context.class_name),
            content=self.renderer.render("Service.java.j2", context),
            layer=Layer.SERVICE,
            preserve_existing=True,
        )

    def _managed_bean(self, entity, packages) -> GeneratedFile:
        return build_managed_bean(self.renderer, entity, packages)

    def _crud_view(self, entity, options: GenerationOptions) -> GeneratedFile:
        context = CrudViewContext(
            template_name=options.faces_template,
            define=options.faces_define,
            title=entity_class_name(entity.name),
            bean_name=uncapitalize(managed_bean_class_name(entity.name)),
            id_field=resolve_identifier(entity).name,
            fields=[f.name for f in fields_with_identifier(entity)],
        )
        return GeneratedFile(
            path=f"{view_name(entity.name)}.xhtml",
            content=self.renderer.render("CrudView.xhtml.j2", context),
            layer=Layer.FACES,
        )


def generate_domain(
    entities_path: Path,
    coordinates: ProjectCoordinates,
    out_dir: Path,
    options: Optional[GenerationOptions] = None,
    repository_builder: Optional[RepositoryBuilder] = None,
    webapp_dir: Optional[Path] = None,
) -> List[WriteResult]:
    """
    Generate and write the artifacts of every entity in a definition file.

    Strict variant of the pipeline: the first malformed entity raises
    SchemaError before anything is written.

    Args:
        entities_path: Path to the entity definition JSON
        coordinates: Project group/artifact identifiers
        out_dir: Java source root
        options: Optional artifacts to include
        repository_builder: Defaults to the Jakarta EE 11 strategy
        webapp_dir: Root for views; defaults to the ``webapp`` sibling of
            ``out_dir``, matching src/main/java and src/main/webapp

    Returns:
        List of WriteResult objects
    """
    entities = parse_entities(Path(entities_path).read_text(encoding="utf-8"))
    emitter = ArtifactEmitter(TemplateRenderer(), repository_builder or RepositoryBuilder())
    files = []
    for entity in entities:
        files.extend(emitter.generate_entity_artifacts(entity, coordinates, options))
    log.info("Generated %d files for %d entities", len(files), len(entities))
    out_dir = Path(out_dir)
    webapp_dir = Path(webapp_dir) if webapp_dir else out_dir.parent / "webapp"
    return write_files(files, out_dir, webapp_dir)
