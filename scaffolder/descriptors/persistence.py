"""Idempotent edits of persistence.xml."""
import logging
import xml.etree.ElementTree as ET
from typing import Dict, Optional
from scaffolder.core.errors import PersistenceUnitNotFoundError
from scaffolder.descriptors.xml import (
    child_text,
    ensure_child,
    find_child,
    find_children,
    insert_ordered,
    make_child,
    new_document,
)

log = logging.getLogger(__name__)

PERSISTENCE_NS = "https://jakarta.ee/xml/ns/persistence"
PERSISTENCE_VERSION = "3.0"
SCHEMA_LOCATION = f"{PERSISTENCE_NS} {PERSISTENCE_NS}/persistence_3_0.xsd"
HIBERNATE_PROVIDER = "org.hibernate.jpa.HibernatePersistenceProvider"

# xs:sequence of persistence-unit
UNIT_CHILD_ORDER = [
    "description",
    "provider",
    "qualifier",
    "scope",
    "jta-data-source",
    "non-jta-data-source",
    "mapping-file",
    "jar-file",
    "class",
    "exclude-unlisted-classes",
    "shared-cache-mode",
    "validation-mode",
    "properties",
]


def create_persistence_document(unit_name: Optional[str] = None) -> ET.ElementTree:
    """New persistence.xml tree, with one JTA unit when ``unit_name`` is given."""
    doc = new_document(PERSISTENCE_NS, "persistence", PERSISTENCE_VERSION, SCHEMA_LOCATION)
    if unit_name:
        ensure_persistence_unit(doc, unit_name)
    return doc


def find_persistence_unit(doc: ET.ElementTree, unit_name: str) -> Optional[ET.Element]:
    return next(
        (unit for unit in find_children(doc.getroot(), "persistence-unit") if unit.get("name") == unit_name),
        None,
    )


def _require_unit(doc: ET.ElementTree, unit_name: str) -> ET.Element:
    unit = find_persistence_unit(doc, unit_name)
    if unit is None:
        raise PersistenceUnitNotFoundError(unit_name)
    return unit


def ensure_persistence_unit(doc: ET.ElementTree, unit_name: str) -> bool:
    if find_persistence_unit(doc, unit_name) is not None:
        return False
    root = doc.getroot()
    unit = make_child(root, "persistence-unit")
    unit.set("name", unit_name)
    unit.set("transaction-type", "JTA")
    root.append(unit)
    log.info("Added persistence unit %s", unit_name)
    return True


def add_data_source_reference(doc: ET.ElementTree, unit_name: str, jdbc_name: str) -> bool:
    """
    Point a persistence unit at a JTA datasource.

    Args:
        doc: persistence.xml tree, mutated in place
        unit_name: name attribute of the target persistence-unit
        jdbc_name: JNDI name of the datasource

    Returns:
        True if the document changed

    Raises:
        PersistenceUnitNotFoundError: no unit with that name
    """
    unit = _require_unit(doc, unit_name)
    existing = find_child(unit, "jta-data-source")
    if existing is not None:
        current = (existing.text or "").strip()
        if current == jdbc_name:
            return False
        # a unit holds a single jta-data-source
        log.warning("Replacing jta-data-source %s with %s in unit %s", current, jdbc_name, unit_name)
        existing.text = jdbc_name
        return True
    insert_ordered(unit, make_child(unit, "jta-data-source", jdbc_name), UNIT_CHILD_ORDER)
    return True


def add_provider(doc: ET.ElementTree, unit_name: str, provider_class: str = HIBERNATE_PROVIDER) -> bool:
    unit = _require_unit(doc, unit_name)
    if child_text(unit, "provider") == provider_class:
        return False
    provider = find_child(unit, "provider")
    if provider is None:
        insert_ordered(unit, make_child(unit, "provider", provider_class), UNIT_CHILD_ORDER)
    else:
        provider.text = provider_class
    return True


def add_properties(doc: ET.ElementTree, unit_name: str, props: Dict[str, str]) -> bool:
    """Set ``<property name=... value=...>`` entries; keyed by name."""
    unit = _require_unit(doc, unit_name)
    if not props:
        return False
    properties = ensure_child(unit, "properties", UNIT_CHILD_ORDER)
    by_name = {p.get("name"): p for p in find_children(properties, "property")}
    changed = False
    for name, value in props.items():
        value = str(value)
        element = by_name.get(name)
        if element is None:
            element = make_child(properties, "property")
            element.set("name", name)
            element.set("value", value)
            properties.append(element)
            changed = True
        elif element.get("value") != value:
            element.set("value", value)
            changed = True
    return changed
