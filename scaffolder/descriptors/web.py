"""Idempotent edits of web.xml: Faces servlet, welcome file, datasource."""
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple
from scaffolder.core.errors import DescriptorError, ServletConfigConflictError
from scaffolder.descriptors.xml import (
    child_text,
    ensure_child,
    find_children,
    insert_after_last,
    insert_ordered,
    make_child,
    new_document,
)
from scaffolder.generators.domain_gen.naming import camel_to_param_case

log = logging.getLogger(__name__)

WEB_NS = "https://jakarta.ee/xml/ns/jakartaee"
WEB_VERSION = "6.0"
SCHEMA_LOCATION = f"{WEB_NS} {WEB_NS}/web-app_6_0.xsd"

FACES_SERVLET_CLASS = "jakarta.faces.webapp.FacesServlet"
DEFAULT_SERVLET_NAME = "Faces Servlet"
DEFAULT_URL_PATTERN = "*.faces"
DEFAULT_WELCOME_FILE = "index.faces"

# xs:sequence of data-sourceType
DATA_SOURCE_CHILD_ORDER = [
    "description",
    "name",
    "class-name",
    "server-name",
    "port-number",
    "database-name",
    "url",
    "user",
    "password",
    "property",
    "login-timeout",
    "transactional",
    "isolation-level",
    "initial-pool-size",
    "max-pool-size",
    "min-pool-size",
    "max-idle-time",
    "max-statements",
]


def create_web_document() -> ET.ElementTree:
    return new_document(WEB_NS, "web-app", WEB_VERSION, SCHEMA_LOCATION)


def _servlet(root: ET.Element, servlet_name: str) -> Optional[ET.Element]:
    return next((s for s in find_children(root, "servlet") if child_text(s, "servlet-name") == servlet_name), None)


def _mapping_for(root: ET.Element, url_pattern: str) -> Optional[ET.Element]:
    for mapping in find_children(root, "servlet-mapping"):
        patterns = [(p.text or "").strip() for p in find_children(mapping, "url-pattern")]
        if url_pattern in patterns:
            return mapping
    return None


def add_faces_servlet(
    doc: ET.ElementTree,
    url_pattern: str = DEFAULT_URL_PATTERN,
    servlet_name: str = DEFAULT_SERVLET_NAME,
    description: Optional[str] = None,
) -> bool:
    """
    Declare the Faces servlet and map it to ``url_pattern``.

    Existing entries are matched by servlet-name and url-pattern. Both checks
    run before the document is touched.

    Raises:
        ServletConfigConflictError: the servlet name is bound to another class,
            or the pattern is already mapped to another servlet
    """
    root = doc.getroot()
    servlet = _servlet(root, servlet_name)
    if servlet is not None and child_text(servlet, "servlet-class") != FACES_SERVLET_CLASS:
        raise ServletConfigConflictError(
            f"Servlet '{servlet_name}' is declared with class {child_text(servlet, 'servlet-class')}"
        )
    mapping = _mapping_for(root, url_pattern)
    if mapping is not None and child_text(mapping, "servlet-name") != servlet_name:
        raise ServletConfigConflictError(
            f"URL pattern {url_pattern} is already mapped to servlet '{child_text(mapping, 'servlet-name')}'"
        )

    changed = False
    if servlet is None:
        servlet = make_child(root, "servlet")
        if description:
            servlet.append(make_child(servlet, "description", description))
        servlet.append(make_child(servlet, "servlet-name", servlet_name))
        servlet.append(make_child(servlet, "servlet-class", FACES_SERVLET_CLASS))
        servlet.append(make_child(servlet, "load-on-startup", "1"))
        insert_after_last(root, servlet, "servlet")
        changed = True
    if mapping is None:
        mapping = make_child(root, "servlet-mapping")
        mapping.append(make_child(mapping, "servlet-name", servlet_name))
        mapping.append(make_child(mapping, "url-pattern", url_pattern))
        insert_after_last(root, mapping, "servlet-mapping")
        changed = True
    return changed


def add_welcome_file(doc: ET.ElementTree, welcome_file: str = DEFAULT_WELCOME_FILE) -> bool:
    welcome_list = ensure_child(doc.getroot(), "welcome-file-list")
    files = [(f.text or "").strip() for f in find_children(welcome_list, "welcome-file")]
    if welcome_file in files:
        return False
    welcome_list.append(make_child(welcome_list, "welcome-file", welcome_file))
    return True


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def add_data_source(doc: ET.ElementTree, properties: Dict[str, Any]) -> bool:
    """
    Declare a ``<data-source>``, keyed by its ``<name>``.

    Args:
        doc: web.xml tree, mutated in place
        properties: camelCase keys (``name``, ``className``, ``serverName``...);
            ``properties`` holds ``key=value`` strings rendered as ``<property>``

    Returns:
        True if the document changed
    """
    name = properties.get("name")
    if not name:
        raise DescriptorError("A data-source needs a name")
    root = doc.getroot()
    if any(child_text(ds, "name") == name for ds in find_children(root, "data-source")):
        return False

    data_source = make_child(root, "data-source")
    for key, value in properties.items():
        if value is None or value == "" or value == []:
            continue
        if key == "properties":
            for prop_name, prop_value in parse_property_entries(value):
                prop = make_child(data_source, "property")
                prop.append(make_child(prop, "name", prop_name))
                prop.append(make_child(prop, "value", prop_value))
                insert_ordered(data_source, prop, DATA_SOURCE_CHILD_ORDER)
            continue
        tag = camel_to_param_case(key)
        if tag not in DATA_SOURCE_CHILD_ORDER:
            raise DescriptorError(f"Unknown data-source setting: {key}")
        insert_ordered(data_source, make_child(data_source, tag, _text(value)), DATA_SOURCE_CHILD_ORDER)
    insert_after_last(root, data_source, "data-source")
    log.info("Declared data-source %s", name)
    return True


def parse_property_entries(values: List[str]) -> List[Tuple[str, str]]:
    """Split ``key=value`` strings; the value may itself contain ``=``."""
    entries = []
    for raw in values:
        key, sep, value = str(raw).partition("=")
        if not sep or not key.strip():
            raise DescriptorError(f"Data-source property must be key=value: {raw}")
        entries.append((key.strip(), value.strip()))
    return entries
