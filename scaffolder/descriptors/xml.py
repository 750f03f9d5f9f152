"""ElementTree helpers shared by the descriptor mergers.

Descriptors are namespaced documents (``persistence.xml``, ``web.xml``,
``pom.xml``). Lookups match on local names so that a descriptor written with
or without its default namespace is handled the same way; new elements take
the namespace of their parent.
"""
import io
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Sequence
from scaffolder.core.errors import DescriptorError

log = logging.getLogger(__name__)

XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"


def _parser() -> ET.XMLParser:
    return ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))


def _register_prefixes(source) -> None:
    # keep the prefixes of the source document when it is written back
    for _, (prefix, uri) in ET.iterparse(source, events=["start-ns"]):
        ET.register_namespace(prefix, uri)


def load_document(path: Path) -> ET.ElementTree:
    """Parse a descriptor file, keeping comments and namespace prefixes."""
    try:
        _register_prefixes(str(path))
        return ET.parse(str(path), parser=_parser())
    except ET.ParseError as e:
        raise DescriptorError(f"Malformed XML in {path}: {e}") from e


def parse_document(text: str) -> ET.ElementTree:
    """Parse descriptor text; same behaviour as ``load_document``."""
    try:
        _register_prefixes(io.BytesIO(text.encode("utf-8")))
        return ET.ElementTree(ET.fromstring(text, parser=_parser()))
    except ET.ParseError as e:
        raise DescriptorError(f"Malformed XML: {e}") from e


def to_string(doc: ET.ElementTree) -> str:
    _register_default(doc.getroot())
    return ET.tostring(doc.getroot(), encoding="unicode")


def save_document(doc: ET.ElementTree, path: Path) -> None:
    """Indent and write a descriptor with an XML declaration."""
    _register_default(doc.getroot())
    ET.indent(doc, space="    ")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc.write(str(path), encoding="UTF-8", xml_declaration=True)
    log.debug("Saved %s", path)


def _register_default(root: ET.Element) -> None:
    # the default-namespace mapping is global; claim it for the document being written
    namespace = namespace_of(root)
    if namespace:
        ET.register_namespace("", namespace)


def new_document(namespace: str, root_name: str, version: str, schema_location: str) -> ET.ElementTree:
    ET.register_namespace("", namespace)
    ET.register_namespace("xsi", XSI_NS)
    root = ET.Element(f"{{{namespace}}}{root_name}")
    root.set(f"{{{XSI_NS}}}schemaLocation", schema_location)
    root.set("version", version)
    return ET.ElementTree(root)


def namespace_of(element: ET.Element) -> str:
    tag = element.tag
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def local_name(element: ET.Element) -> str:
    # comments carry a function as tag
    if not isinstance(element.tag, str):
        return ""
    return element.tag.rsplit("}", 1)[-1]


def qualify(parent: ET.Element, name: str) -> str:
    namespace = namespace_of(parent)
    return f"{{{namespace}}}{name}" if namespace else name


def find_children(parent: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in parent if local_name(child) == name]


def find_child(parent: ET.Element, name: str) -> Optional[ET.Element]:
    return next((child for child in parent if local_name(child) == name), None)


def child_text(parent: ET.Element, name: str) -> Optional[str]:
    child = find_child(parent, name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def make_child(parent: ET.Element, name: str, text: Optional[str] = None) -> ET.Element:
    """Build an element in the namespace of ``parent`` without attaching it."""
    element = ET.Element(qualify(parent, name))
    if text is not None:
        element.text = text
    return element


def insert_ordered(parent: ET.Element, child: ET.Element, order: Sequence[str]) -> None:
    """
    Insert ``child`` where the schema's sequence order puts it.

    The child goes before the first existing sibling that must follow it;
    siblings unknown to ``order`` do not move the insertion point.
    """
    position = order.index(local_name(child))
    index = len(parent)
    for i, sibling in enumerate(parent):
        name = local_name(sibling)
        if name in order and order.index(name) > position:
            index = i
            break
    parent.insert(index, child)


def insert_after_last(parent: ET.Element, child: ET.Element, name: str) -> None:
    """Insert ``child`` after the last sibling called ``name``, or append it."""
    index = len(parent)
    for i, sibling in enumerate(parent):
        if local_name(sibling) == name:
            index = i + 1
    parent.insert(index, child)


def ensure_child(parent: ET.Element, name: str, order: Optional[Sequence[str]] = None) -> ET.Element:
    """Return the child called ``name``, creating it (ordered, or appended) when missing."""
    child = find_child(parent, name)
    if child is not None:
        return child
    child = make_child(parent, name)
    if order:
        insert_ordered(parent, child, order)
    else:
        parent.append(child)
    return child
