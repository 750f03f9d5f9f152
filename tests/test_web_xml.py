"""Tests for web.xml merging: Faces servlet, welcome file and data-source."""
import pytest
from scaffolder.core.errors import DescriptorError, ServletConfigConflictError
from scaffolder.descriptors import web
from scaffolder.descriptors.xml import child_text, find_child, find_children, local_name, parse_document, to_string

WEB_XML = """<web-app xmlns="https://jakarta.ee/xml/ns/jakartaee" version="6.0">
    <display-name>shop</display-name>
</web-app>
"""

FOREIGN_SERVLET_XML = """<web-app xmlns="https://jakarta.ee/xml/ns/jakartaee" version="6.0">
    <servlet>
        <servlet-name>Faces Servlet</servlet-name>
        <servlet-class>com.acme.OtherServlet</servlet-class>
    </servlet>
</web-app>
"""

FOREIGN_MAPPING_XML = """<web-app xmlns="https://jakarta.ee/xml/ns/jakartaee" version="6.0">
    <servlet-mapping>
        <servlet-name>Rest</servlet-name>
        <url-pattern>*.faces</url-pattern>
    </servlet-mapping>
</web-app>
"""


def test_faces_servlet_added_once():
    doc = parse_document(WEB_XML)
    assert web.add_faces_servlet(doc) is True
    snapshot = to_string(doc)
    assert web.add_faces_servlet(doc) is False
    assert to_string(doc) == snapshot

    root = doc.getroot()
    servlets = find_children(root, "servlet")
    assert len(servlets) == 1
    assert child_text(servlets[0], "servlet-class") == web.FACES_SERVLET_CLASS
    assert child_text(servlets[0], "load-on-startup") == "1"
    mappings = find_children(root, "servlet-mapping")
    assert len(mappings) == 1
    assert child_text(mappings[0], "url-pattern") == "*.faces"
    assert child_text(mappings[0], "servlet-name") == "Faces Servlet"


def test_servlet_with_custom_pattern_and_description():
    doc = parse_document(WEB_XML)
    web.add_faces_servlet(doc, url_pattern="/faces/*", servlet_name="FacesServlet", description="Faces")
    servlet = find_child(doc.getroot(), "servlet")
    assert [local_name(c) for c in servlet] == ["description", "servlet-name", "servlet-class", "load-on-startup"]
    assert child_text(find_child(doc.getroot(), "servlet-mapping"), "url-pattern") == "/faces/*"


@pytest.mark.parametrize("text", [FOREIGN_SERVLET_XML, FOREIGN_MAPPING_XML])
def test_conflicts_leave_document_unchanged(text):
    doc = parse_document(text)
    before = to_string(doc)
    with pytest.raises(ServletConfigConflictError):
        web.add_faces_servlet(doc)
    assert to_string(doc) == before


def test_conflict_is_a_descriptor_error():
    doc = parse_document(FOREIGN_SERVLET_XML)
    with pytest.raises(DescriptorError):
        web.add_faces_servlet(doc)


def test_welcome_file():
    doc = parse_document(WEB_XML)
    assert web.add_welcome_file(doc) is True
    assert web.add_welcome_file(doc) is False
    welcome_list = find_child(doc.getroot(), "welcome-file-list")
    assert [f.text for f in find_children(welcome_list, "welcome-file")] == ["index.faces"]


def test_data_source_children_follow_schema_order():
    doc = web.create_web_document()
    settings = {
        "url": "jdbc:h2:mem:sample",
        "className": "org.h2.jdbcx.JdbcDataSource",
        "name": "java:app/jdbc/Sample",
        "properties": ["cacheSize=100", "mode=MySQL;x=1"],
        "transactional": True,
    }
    assert web.add_data_source(doc, settings) is True
    assert web.add_data_source(doc, settings) is False

    data_sources = find_children(doc.getroot(), "data-source")
    assert len(data_sources) == 1
    names = [local_name(c) for c in data_sources[0]]
    assert names == ["name", "class-name", "url", "property", "property", "transactional"]
    assert child_text(data_sources[0], "transactional") == "true"
    values = [(child_text(p, "name"), child_text(p, "value")) for p in find_children(data_sources[0], "property")]
    assert values == [("cacheSize", "100"), ("mode", "MySQL;x=1")]


def test_data_source_rejects_unknown_setting_and_missing_name():
    doc = web.create_web_document()
    with pytest.raises(DescriptorError):
        web.add_data_source(doc, {"name": "java:app/jdbc/A", "colour": "red"})
    with pytest.raises(DescriptorError):
        web.add_data_source(doc, {"url": "jdbc:h2:mem:a"})


def test_parse_property_entries():
    assert web.parse_property_entries(["a=1", " b = x=y "]) == [("a", "1"), ("b", "x=y")]
    with pytest.raises(DescriptorError):
        web.parse_property_entries(["novalue"])
