"""Package and class name derivation for generated artifacts."""
import re
from enum import Enum
from typing import Dict, Iterable, List


class Layer(str, Enum):
    """Architectural layers; the value is the package suffix."""
    ENTITY = "entity"
    MODEL = "model"
    REPOSITORY = "repository"
    MAPPER = "mapper"
    SERVICE = "service"
    PROVIDER = "provider"
    FACES = "faces"
    RESOURCES = "resources"


# Well-known Java types that need an import when used as a field type.
JAVA_TYPE_IMPORTS = {
    "BigDecimal": "java.math.BigDecimal",
    "BigInteger": "java.math.BigInteger",
    "LocalDate": "java.time.LocalDate",
    "LocalDateTime": "java.time.LocalDateTime",
    "LocalTime": "java.time.LocalTime",
    "Instant": "java.time.Instant",
    "OffsetDateTime": "java.time.OffsetDateTime",
    "ZonedDateTime": "java.time.ZonedDateTime",
    "Duration": "java.time.Duration",
    "UUID": "java.util.UUID",
    "Date": "java.util.Date",
    "List": "java.util.List",
    "Set": "java.util.Set",
    "Map": "java.util.Map",
}

# Generic type arguments cannot be primitives.
BOXED_TYPES = {
    "boolean": "Boolean",
    "byte": "Byte",
    "char": "Character",
    "short": "Short",
    "int": "Integer",
    "long": "Long",
    "float": "Float",
    "double": "Double",
}

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def project_package(group_id: str, artifact_id: str) -> str:
    """Base package of a project: every non-alphanumeric character becomes a dot."""
    return ".".join(_NON_ALNUM.sub(".", part) for part in (group_id, artifact_id) if part)


def derive_package(group_id: str, artifact_id: str, layer: Layer) -> str:
    """
    Package for one architectural layer.

    Callers must pass non-empty coordinates; empty ones are not rejected here
    and yield ".<layer>".
    """
    return f"{project_package(group_id, artifact_id)}.{Layer(layer).value}"


def package_set(group_id: str, artifact_id: str) -> Dict[Layer, str]:
    """Every layer package of a project, keyed by layer."""
    return {layer: derive_package(group_id, artifact_id, layer) for layer in Layer}


def to_pascal_case(value: str) -> str:
    """Convert any delimited string to PascalCase ("crud-product" -> "CrudProduct")."""
    parts = re.split(r"[^a-zA-Z0-9]+", value or "")
    return "".join(p[:1].upper() + p[1:] for p in parts if p)


def uncapitalize(value: str) -> str:
    return value[:1].lower() + value[1:] if value else value


def capitalize(value: str) -> str:
    # unlike str.capitalize, keeps the rest untouched ("createdAt" -> "CreatedAt")
    return value[:1].upper() + value[1:] if value else value


def getter_name(field_name: str) -> str:
    return f"get{capitalize(field_name)}"


def boxed(java_type: str) -> str:
    return BOXED_TYPES.get(java_type, java_type)


def to_camel_case(value: str) -> str:
    return uncapitalize(to_pascal_case(value))


def camel_to_param_case(name: str) -> str:
    """Convert camelCase to param-case ("serverName" -> "server-name")."""
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1-\2', name)
    s2 = re.sub('([a-z0-9])([A-Z])', r'\1-\2', s1)
    return s2.lower()


def entity_class_name(entity_name: str) -> str:
    return to_pascal_case(entity_name)


def repository_class_name(entity_name: str) -> str:
    return f"{entity_class_name(entity_name)}Repository"


def repository_impl_class_name(entity_name: str) -> str:
    return f"{repository_class_name(entity_name)}Impl"


def model_class_name(entity_name: str) -> str:
    return f"{entity_class_name(entity_name)}Dto"


def mapper_class_name(entity_name: str) -> str:
    return f"{entity_class_name(entity_name)}Mapper"


def service_class_name(entity_name: str) -> str:
    return f"{entity_class_name(entity_name)}Service"


def managed_bean_class_name(entity_name: str) -> str:
    return f"{entity_class_name(entity_name)}Bean"


def view_name(entity_name: str) -> str:
    """File name (without extension) of the CRUD view for an entity."""
    return camel_to_param_case(entity_class_name(entity_name))


def java_path(package: str, class_name: str) -> str:
    """Relative source path of a Java class."""
    return "/".join(package.split(".") + [f"{class_name}.java"])


def qualified(package: str, class_name: str) -> str:
    return f"{package}.{class_name}"


def simple_name(qualified_name: str) -> str:
    return qualified_name.rsplit(".", 1)[-1]


def imports_for_types(types: Iterable[str]) -> List[str]:
    """Imports needed for the given field types, in first-use order."""
    imports = []
    for java_type in types:
        # List<LocalDate> -> List, LocalDate
        for token in re.findall(r"[A-Za-z_][A-Za-z0-9_]*", java_type):
            full_name = JAVA_TYPE_IMPORTS.get(token)
            if full_name and full_name not in imports:
                imports.append(full_name)
    return imports
