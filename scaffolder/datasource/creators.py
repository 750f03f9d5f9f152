"""Datasource declaration, either in web.xml or as an annotated provider class."""
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from scaffolder.core.errors import DataSourceNameError
from scaffolder.descriptors import web
from scaffolder.descriptors.xml import load_document, save_document
from scaffolder.generators.domain_gen.naming import Layer, derive_package, java_path
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.types import GeneratedFile, WriteStatus
from scaffolder.generators.domain_gen.writer import write_files
from scaffolder.schemas.contexts import AnnotationSpec, JavaBeanContext
from scaffolder.schemas.entities import ProjectCoordinates

log = logging.getLogger(__name__)

DECLARE_WEB = "web"
DECLARE_CLASS = "class"

JNDI_PREFIXES = {
    DECLARE_WEB: "java:global/jdbc/",
    DECLARE_CLASS: "java:app/jdbc/",
}

DEFAULT_DRIVER = "com.h2database:h2"
DEFAULT_DATA_SOURCE_CLASS = "org.h2.jdbcx.JdbcDataSource"
PROVIDER_CLASS_NAME = "DataSourceProvider"
DATA_SOURCE_DEFINITION = "jakarta.annotation.sql.DataSourceDefinition"

_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")


def validate_data_source_name(declare: str, name: str) -> str:
    """
    Check a bare datasource name and return its JNDI name.

    Raises:
        DataSourceNameError: the name is not an identifier or ``declare`` is unknown
    """
    if declare not in JNDI_PREFIXES:
        raise DataSourceNameError(f"Unknown declaration kind '{declare}', expected web or class")
    if not name or not _NAME_PATTERN.match(name):
        raise DataSourceNameError(f"Invalid datasource name: {name!r}")
    return JNDI_PREFIXES[declare] + name


class DataSourceParameters(BaseModel):
    """Settings of one datasource; ``name`` is the full JNDI name."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    class_name: str = Field(default=DEFAULT_DATA_SOURCE_CLASS, alias="className")
    server_name: Optional[str] = Field(default=None, alias="serverName")
    port_number: Optional[int] = Field(default=None, alias="portNumber")
    url: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = None
    properties: List[str] = Field(default_factory=list)  # "key=value"

    def as_settings(self) -> Dict[str, Any]:
        """camelCase mapping in declaration order, unset values and empty lists left out."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not data.get("properties"):
            data.pop("properties", None)
        return data


class WebDataSourceCreator:
    """Declares the datasource as a ``<data-source>`` in web.xml."""

    def __init__(self, web_xml_path: Path):
        self.web_xml_path = Path(web_xml_path)

    def create(self, parameters: DataSourceParameters) -> bool:
        if self.web_xml_path.exists():
            doc = load_document(self.web_xml_path)
        else:
            doc = web.create_web_document()
        changed = web.add_data_source(doc, parameters.as_settings())
        if changed:
            save_document(doc, self.web_xml_path)
        return changed


class ClassDataSourceCreator:
    """Declares the datasource with ``@DataSourceDefinition`` on a provider class."""

    def __init__(self, renderer: TemplateRenderer, java_root: Path, coordinates: ProjectCoordinates):
        self.renderer = renderer
        self.java_root = Path(java_root)
        self.coordinates = coordinates

    def build(self, parameters: DataSourceParameters) -> GeneratedFile:
        package = derive_package(self.coordinates.group_id, self.coordinates.artifact_id, Layer.PROVIDER)
        context = JavaBeanContext(
            package_name=package,
            class_name=PROVIDER_CLASS_NAME,
            imports=[DATA_SOURCE_DEFINITION],
            annotations=[AnnotationSpec(name=DATA_SOURCE_DEFINITION, properties=parameters.as_settings())],
        )
        return GeneratedFile(
            path=java_path(package, PROVIDER_CLASS_NAME),
            content=self.renderer.render("JavaBean.java.j2", context),
            layer=Layer.PROVIDER,
        )

    def create(self, parameters: DataSourceParameters) -> bool:
        [result] = write_files([self.build(parameters)], self.java_root)
        return result.status is WriteStatus.WRITTEN


def data_source_creator(
    declare: str,
    project_dir: Path,
    renderer: TemplateRenderer,
    coordinates: ProjectCoordinates,
    java_source_dir: str = "src/main/java",
    webapp_dir: str = "src/main/webapp",
):
    """Pick the creator for a declaration kind (``web`` or ``class``)."""
    project_dir = Path(project_dir)
    if declare == DECLARE_WEB:
        return WebDataSourceCreator(project_dir / webapp_dir / "WEB-INF" / "web.xml")
    if declare == DECLARE_CLASS:
        return ClassDataSourceCreator(renderer, project_dir / java_source_dir, coordinates)
    raise DataSourceNameError(f"Unknown declaration kind '{declare}', expected web or class")
