"""Repository generation for both supported Jakarta EE versions."""
from dataclasses import dataclass
from typing import Dict, List
from scaffolder.core.workflow import JakartaVersion
from scaffolder.generators.domain_gen.naming import (
    BOXED_TYPES,
    Layer,
    boxed,
    entity_class_name,
    getter_name,
    imports_for_types,
    java_path,
    qualified,
    repository_class_name,
    repository_impl_class_name,
)
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.schema import resolve_identifier
from scaffolder.generators.domain_gen.types import GeneratedFile
from scaffolder.schemas.contexts import RepositoryContext, RepositoryImplContext
from scaffolder.schemas.entities import EntityDescriptor, RepositoryKind

# Jakarta Data base interfaces per repository kind.
DATA_BASE_INTERFACES = {
    RepositoryKind.CRUD: "jakarta.data.repository.CrudRepository",
    RepositoryKind.BASIC: "jakarta.data.repository.BasicRepository",
    RepositoryKind.CUSTOM: "jakarta.data.repository.DataRepository",
}


@dataclass(frozen=True)
class RepositoryBuilder:
    """
    Builds the repository artifacts of one entity.

    The target Jakarta EE version selects the strategy:

    * 11: a Jakarta Data ``@Repository`` interface; the provider implements it.
    * 10: a plain interface plus an ``EntityManager`` based implementation.
    """

    version: JakartaVersion = JakartaVersion.JAKARTA_11

    def build(
        self,
        renderer: TemplateRenderer,
        entity: EntityDescriptor,
        packages: Dict[Layer, str],
    ) -> List[GeneratedFile]:
        if self.version is JakartaVersion.JAKARTA_11:
            return [self._data_repository(renderer, entity, packages)]
        return self._entity_manager_repository(renderer, entity, packages)

    def _data_repository(self, renderer, entity, packages) -> GeneratedFile:
        package = packages[Layer.REPOSITORY]
        class_name = repository_class_name(entity.name)
        entity_name = entity_class_name(entity.name)
        id_type = boxed(resolve_identifier(entity).type)
        base_interface = DATA_BASE_INTERFACES[entity.repository_kind]

        imports = {
            "jakarta.data.repository.Repository",
            base_interface,
            qualified(packages[Layer.ENTITY], entity_name),
            *imports_for_types([id_type]),
        }
        context = RepositoryContext(
            package_name=package,
            class_name=class_name,
            entity_name=entity_name,
            id_type=id_type,
            imports=sorted(imports),
            base_interface=base_interface.rsplit(".", 1)[-1],
            crud_operations=entity.repository_kind is not RepositoryKind.CUSTOM,
        )
        return GeneratedFile(
            path=java_path(package, class_name),
            content=renderer.render("DataRepository.java.j2", context),
            layer=Layer.REPOSITORY,
        )

    def _entity_manager_repository(self, renderer, entity, packages) -> List[GeneratedFile]:
        package = packages[Layer.REPOSITORY]
        class_name = repository_class_name(entity.name)
        impl_name = repository_impl_class_name(entity.name)
        entity_name = entity_class_name(entity.name)
        identifier = resolve_identifier(entity)
        id_type = boxed(identifier.type)
        crud = entity.repository_kind is not RepositoryKind.CUSTOM

        entity_import = qualified(packages[Layer.ENTITY], entity_name)
        crud_imports = {"java.util.Optional", "java.util.stream.Stream"} if crud else set()
        id_imports = set(imports_for_types([id_type])) if crud else set()

        interface = RepositoryContext(
            package_name=package,
            class_name=class_name,
            entity_name=entity_name,
            id_type=id_type,
            imports=sorted({entity_import} | crud_imports | id_imports) if crud else [],
            crud_operations=crud,
        )
        implementation = RepositoryImplContext(
            package_name=package,
            class_name=impl_name,
            interface_name=class_name,
            entity_name=entity_name,
            id_type=id_type,
            id_getter=getter_name(identifier.name),
            id_primitive=identifier.type in BOXED_TYPES,
            imports=sorted(
                {
                    "jakarta.enterprise.context.ApplicationScoped",
                    "jakarta.persistence.EntityManager",
                    "jakarta.persistence.PersistenceContext",
                    "jakarta.transaction.Transactional",
                }
                | ({entity_import} if crud else set())
                | crud_imports
                | id_imports
            ),
            crud_operations=crud,
        )
        return [
            GeneratedFile(
                path=java_path(package, class_name),
                content=renderer.render("Repository.java.j2", interface),
                layer=Layer.REPOSITORY,
            ),
            GeneratedFile(
                path=java_path(package, impl_name),
                content=renderer.render("RepositoryImpl.java.j2", implementation),
                layer=Layer.REPOSITORY,
            ),
        ]
