"""PrimeFaces forms generated from entity definitions.

A forms document maps each form name to the entity it edits::

    {
      "product": {
        "entity": "Product",
        "base": "/admin/",
        "title": "Products",
        "template": {"facelet": "/WEB-INF/template.xhtml", "define": "content"},
        "fields": {"title": {"label": "Title"}, "price": {"label": "Price"}}
      }
    }

Every form yields a page, a view-scoped bean and ``<Entity>_<field>`` labels
in ``messages.properties``.
"""
import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError
from scaffolder.core.errors import SchemaError
from scaffolder.faces.pages import XHTML_SUFFIX, page_bean_class_name, page_stem
from scaffolder.generators.domain_gen.generator import build_managed_bean
from scaffolder.generators.domain_gen.naming import Layer, entity_class_name, package_set, uncapitalize
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.types import GeneratedFile
from scaffolder.schemas.contexts import FormFieldContext, FormPageContext
from scaffolder.schemas.entities import EntityDescriptor, ProjectCoordinates, RepositoryKind

log = logging.getLogger(__name__)

MESSAGES_FILE = "messages.properties"

# PrimeFaces input component per Java field type; anything else is a text input.
INPUT_COMPONENTS = {
    "String": "inputText",
    "Integer": "inputNumber",
    "int": "inputNumber",
    "Long": "inputNumber",
    "long": "inputNumber",
    "BigDecimal": "inputNumber",
    "LocalDate": "datePicker",
    "Boolean": "toggleSwitch",
    "boolean": "toggleSwitch",
}


def input_component(java_type: str) -> str:
    return INPUT_COMPONENTS.get(java_type, "inputText")


class _Form(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class FormField(_Form):
    label: Optional[StrictStr] = None


class FormTemplate(_Form):
    facelet: StrictStr = Field(min_length=1)
    define: StrictStr = "content"


class FormDescriptor(_Form):
    name: StrictStr = Field(min_length=1)
    entity: StrictStr = Field(min_length=1)
    base: StrictStr = "/"
    title: Optional[StrictStr] = None
    template: Optional[FormTemplate] = None
    fields: Dict[str, FormField] = Field(default_factory=dict)

    @property
    def page_name(self) -> str:
        return page_stem(self.base + self.name)


def load_forms(json_text: str) -> List[FormDescriptor]:
    """
    Parse a forms document, in declaration order.

    Entries that are not objects naming an ``entity`` are skipped.

    Raises:
        SchemaError: the document is not a JSON object or a form is malformed
    """
    try:
        document = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Forms are not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise SchemaError("Forms must be a JSON object keyed by form name")

    forms = []
    for name, raw in document.items():
        if not isinstance(raw, dict) or "entity" not in raw:
            log.debug("Skipping %s: not a form", name)
            continue
        try:
            forms.append(FormDescriptor(name=name, **{k: v for k, v in raw.items() if k != "name"}))
        except (ValidationError, ValueError) as e:
            raise SchemaError(f"Form {name}: {e}") from e
    return forms


_ESCAPED = re.compile(r"\\(.)")


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n")


def _unescape(value: str) -> str:
    return _ESCAPED.sub(lambda m: "\n" if m.group(1) == "n" else m.group(1), value)


def read_messages(path: Path) -> Dict[str, str]:
    """Read ``key=value`` lines of a properties file; comments and blanks are skipped."""
    messages = {}
    if not Path(path).exists():
        return messages
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line[0] in "#!":
            continue
        key, _, value = line.partition("=")
        messages[key.strip()] = _unescape(value.strip())
    return messages


def merge_messages(path: Path, entries: Dict[str, str]) -> bool:
    """Add or update ``entries`` in a properties file; returns False when nothing changed."""
    path = Path(path)
    messages = read_messages(path)
    if all(messages.get(key) == value for key, value in entries.items()):
        return False
    messages.update(entries)
    lines = [f"{key}={_escape(value)}" for key, value in messages.items()]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    log.info("Updated %d labels in %s", len(entries), path)
    return True


class FormBuilder:
    """Renders the page and bean of one form; nothing is written here."""

    def __init__(self, renderer: TemplateRenderer, coordinates: ProjectCoordinates):
        self.renderer = renderer
        self.packages = package_set(coordinates.group_id, coordinates.artifact_id)

    def fields(self, form: FormDescriptor, entity: EntityDescriptor) -> List[FormFieldContext]:
        """
        Form fields in form order; without any, every entity field but the identifier.

        Raises:
            SchemaError: a form field is not a field of the entity
        """
        entity_fields = {f.name: f for f in entity.fields}
        names = list(form.fields) or [f.name for f in entity.fields if not f.is_id]
        unknown = [name for name in names if name not in entity_fields]
        if unknown:
            raise SchemaError(f"Form {form.name}: {entity.name} has no field {', '.join(unknown)}", entity=entity.name)
        return [
            FormFieldContext(
                name=name,
                label=(form.fields.get(name) or FormField()).label or name,
                component=input_component(entity_fields[name].type),
            )
            for name in names
        ]

    def messages(self, form: FormDescriptor, entity: EntityDescriptor) -> Dict[str, str]:
        prefix = entity_class_name(entity.name)
        return {f"{prefix}_{field.name}": field.label for field in self.fields(form, entity)}

    def build(self, form: FormDescriptor, entity: EntityDescriptor) -> List[GeneratedFile]:
        """Page and bean of a form; the bean edits the entity through its service."""
        bean_class = page_bean_class_name(form.page_name)
        crud = entity.repository_kind is not RepositoryKind.CUSTOM
        context = FormPageContext(
            title=form.title or form.name,
            form_id=f"{uncapitalize(entity_class_name(entity.name))}Form",
            bean_name=uncapitalize(bean_class),
            fields=self.fields(form, entity),
            template_name=form.template.facelet if form.template else None,
            define=form.template.define if form.template else "content",
            crud_operations=crud,
        )
        page = GeneratedFile(
            path=form.page_name + XHTML_SUFFIX,
            content=self.renderer.render("FormPage.xhtml.j2", context),
            layer=Layer.FACES,
            preserve_existing=True,
        )
        return [page, build_managed_bean(self.renderer, entity, self.packages, bean_class)]
