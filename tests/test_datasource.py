"""Tests for datasource naming and the two declaration styles."""
import pytest
from scaffolder.core.errors import DataSourceNameError
from scaffolder.datasource.creators import (
    ClassDataSourceCreator,
    DataSourceParameters,
    WebDataSourceCreator,
    data_source_creator,
    validate_data_source_name,
)
from scaffolder.descriptors.xml import child_text, find_children, load_document
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.schemas.entities import ProjectCoordinates

COORDINATES = ProjectCoordinates(group_id="com.acme", artifact_id="shop")


def test_jndi_prefix_per_declaration_kind():
    assert validate_data_source_name("web", "Sample") == "java:global/jdbc/Sample"
    assert validate_data_source_name("class", "sample_db2") == "java:app/jdbc/sample_db2"


@pytest.mark.parametrize("name", ["", "1db", "my-db", "jdbc/Sample", "with space"])
def test_invalid_names_rejected(name):
    with pytest.raises(DataSourceNameError):
        validate_data_source_name("web", name)


def test_name_error_is_value_error():
    with pytest.raises(ValueError):
        validate_data_source_name("xml", "Sample")


def test_parameters_accept_camel_case_and_drop_unset():
    parameters = DataSourceParameters(name="java:app/jdbc/Sample", url="jdbc:h2:mem:sample", portNumber=9092)
    assert parameters.port_number == 9092
    assert parameters.as_settings() == {
        "name": "java:app/jdbc/Sample",
        "className": "org.h2.jdbcx.JdbcDataSource",
        "portNumber": 9092,
        "url": "jdbc:h2:mem:sample",
    }


def test_web_creator_creates_descriptor(tmp_path):
    web_xml = tmp_path / "WEB-INF" / "web.xml"
    creator = WebDataSourceCreator(web_xml)
    parameters = DataSourceParameters(name="java:global/jdbc/Sample", url="jdbc:h2:mem:sample", user="sa")
    assert creator.create(parameters) is True
    assert creator.create(parameters) is False

    doc = load_document(web_xml)
    [data_source] = find_children(doc.getroot(), "data-source")
    assert child_text(data_source, "name") == "java:global/jdbc/Sample"
    assert child_text(data_source, "class-name") == "org.h2.jdbcx.JdbcDataSource"
    assert child_text(data_source, "user") == "sa"


def test_class_creator_renders_provider(tmp_path):
    java_root = tmp_path / "src/main/java"
    creator = ClassDataSourceCreator(TemplateRenderer(), java_root, COORDINATES)
    parameters = DataSourceParameters(
        name="java:app/jdbc/Sample",
        url="jdbc:h2:mem:sample",
        properties=["a=1"],
    )
    assert creator.create(parameters) is True
    assert creator.create(parameters) is False

    content = (java_root / "com/acme/shop/provider/DataSourceProvider.java").read_text(encoding="utf-8")
    assert content.startswith("package com.acme.shop.provider;\n")
    assert "import jakarta.annotation.sql.DataSourceDefinition;" in content
    assert (
        '@DataSourceDefinition(name = "java:app/jdbc/Sample", className = "org.h2.jdbcx.JdbcDataSource", '
        'url = "jdbc:h2:mem:sample", properties = {"a=1"})\npublic class DataSourceProvider {'
    ) in content


def test_creator_factory(tmp_path):
    renderer = TemplateRenderer()
    web_creator = data_source_creator("web", tmp_path, renderer, COORDINATES)
    assert isinstance(web_creator, WebDataSourceCreator)
    assert web_creator.web_xml_path == tmp_path / "src/main/webapp/WEB-INF/web.xml"
    assert isinstance(data_source_creator("class", tmp_path, renderer, COORDINATES), ClassDataSourceCreator)
    with pytest.raises(DataSourceNameError):
        data_source_creator("yaml", tmp_path, renderer, COORDINATES)
