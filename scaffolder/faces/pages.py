"""Facelet templates and pages, each page optionally backed by a managed bean."""
import logging
from pathlib import Path
from typing import List, Optional
from scaffolder.core.errors import DescriptorError
from scaffolder.descriptors.xml import load_document, local_name, namespace_of
from scaffolder.generators.domain_gen.naming import Layer, derive_package, java_path, to_pascal_case, uncapitalize
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.types import GeneratedFile
from scaffolder.schemas.contexts import (
    AnnotationSpec,
    FacePageContext,
    FaceTemplateContext,
    FieldContext,
    JavaBeanContext,
)
from scaffolder.schemas.entities import ProjectCoordinates

log = logging.getLogger(__name__)

FACELETS_NS = "jakarta.faces.facelets"
XHTML_SUFFIX = ".xhtml"

PAGE_BEAN_ANNOTATIONS = ("jakarta.enterprise.context.Dependent", "jakarta.inject.Named")


def page_stem(name: str) -> str:
    """Webapp-relative page path without extension ("/WEB-INF/layout.xhtml" -> "WEB-INF/layout")."""
    stem = (name or "").strip().lstrip("/")
    if stem.endswith(XHTML_SUFFIX):
        stem = stem[: -len(XHTML_SUFFIX)]
    if not stem:
        raise ValueError(f"Invalid page name: {name!r}")
    return stem


def page_bean_class_name(stem: str) -> str:
    return f"{to_pascal_case(stem)}Bean"


def template_inserts(path: Path) -> List[str]:
    """
    Names of the ``ui:insert`` points of a facelet template, in document order.

    Raises:
        DescriptorError: the template is missing or not well-formed XML
    """
    path = Path(path)
    if not path.is_file():
        raise DescriptorError(f"Facelet template not found: {path}")
    root = load_document(path).getroot()
    return [
        element.get("name")
        for element in root.iter()
        if local_name(element) == "insert" and namespace_of(element) == FACELETS_NS and element.get("name")
    ]


class FacePageBuilder:
    """Renders facelet templates and pages of one project; nothing is written here."""

    def __init__(self, renderer: TemplateRenderer, coordinates: ProjectCoordinates, webapp_root: Path):
        self.renderer = renderer
        self.coordinates = coordinates
        self.webapp_root = Path(webapp_root)

    def template(self, name: str, inserts: List[str]) -> GeneratedFile:
        stem = page_stem(name)
        context = FaceTemplateContext(title=Path(stem).name, inserts=inserts)
        return GeneratedFile(
            path=stem + XHTML_SUFFIX,
            content=self.renderer.render("FaceTemplate.xhtml.j2", context),
            layer=Layer.FACES,
            preserve_existing=True,
        )

    def page(self, name: str, template: Optional[str] = None, managed_bean: bool = True) -> List[GeneratedFile]:
        """
        Render a page and, when requested, the ``@Named`` bean it shows.

        With ``template`` the page is a composition filling every insert
        point of that template, which must already exist under the webapp.

        Raises:
            DescriptorError: the template is missing or malformed
        """
        stem = page_stem(name)
        bean_class = page_bean_class_name(stem)
        inserts = template_inserts(self.webapp_root / template.lstrip("/")) if template else []
        if template and not inserts:
            log.warning("Template %s declares no ui:insert", template)

        context = FacePageContext(
            title=Path(stem).name,
            template_name=template,
            bean_name=uncapitalize(bean_class) if managed_bean else None,
            inserts=inserts,
        )
        files = [
            GeneratedFile(
                path=stem + XHTML_SUFFIX,
                content=self.renderer.render("FacePage.xhtml.j2", context),
                layer=Layer.FACES,
                preserve_existing=True,
            )
        ]
        if managed_bean:
            files.append(self._bean(bean_class))
        return files

    def _bean(self, class_name: str) -> GeneratedFile:
        package = derive_package(self.coordinates.group_id, self.coordinates.artifact_id, Layer.FACES)
        context = JavaBeanContext(
            package_name=package,
            class_name=class_name,
            imports=sorted(PAGE_BEAN_ANNOTATIONS),
            annotations=[AnnotationSpec(name=name) for name in PAGE_BEAN_ANNOTATIONS],
            fields=[FieldContext(name="name", type="String", capitalized="Name")],
        )
        return GeneratedFile(
            path=java_path(package, class_name),
            content=self.renderer.render("JavaBean.java.j2", context),
            layer=Layer.FACES,
            preserve_existing=True,
        )
