"""Tests for facelet templates, pages and their managed beans."""
import pytest
from scaffolder.core.errors import DescriptorError
from scaffolder.faces.pages import FacePageBuilder, page_bean_class_name, page_stem, template_inserts
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.schemas.entities import ProjectCoordinates

COORDINATES = ProjectCoordinates(group_id="com.acme", artifact_id="shop")


@pytest.fixture
def webapp(tmp_path):
    return tmp_path / "src/main/webapp"


@pytest.fixture
def builder(webapp):
    return FacePageBuilder(TemplateRenderer(), COORDINATES, webapp)


def _write(webapp, generated):
    path = webapp / generated.path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generated.content, encoding="utf-8")
    return path


@pytest.mark.parametrize("name,expected", [
    ("home", "home"),
    ("/home.xhtml", "home"),
    ("/WEB-INF/template.xhtml", "WEB-INF/template"),
    ("admin/users", "admin/users"),
])
def test_page_stem(name, expected):
    assert page_stem(name) == expected


@pytest.mark.parametrize("name", ["", "/", ".xhtml"])
def test_page_stem_rejects_empty_names(name):
    with pytest.raises(ValueError):
        page_stem(name)


def test_bean_named_after_page_path():
    assert page_bean_class_name("home") == "HomeBean"
    assert page_bean_class_name("admin/user-list") == "AdminUserListBean"


def test_template_lists_insert_points(builder, webapp):
    template = builder.template("/WEB-INF/template.xhtml", ["top", "content", "bottom"])
    assert template.path == "WEB-INF/template.xhtml"
    assert template.preserve_existing
    assert '<ui:insert name="content">content</ui:insert>' in template.content
    assert template.content.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<!DOCTYPE html>\n')

    path = _write(webapp, template)
    assert template_inserts(path) == ["top", "content", "bottom"]


def test_template_inserts_of_missing_file(tmp_path):
    with pytest.raises(DescriptorError):
        template_inserts(tmp_path / "missing.xhtml")


def test_page_with_managed_bean(builder):
    page, bean = builder.page("home")
    assert page.path == "home.xhtml"
    assert "<f:view>" in page.content
    assert '<h:outputText value="#{homeBean.name}"/>' in page.content

    assert bean.path == "com/acme/shop/faces/HomeBean.java"
    assert bean.preserve_existing
    assert bean.content.startswith("package com.acme.shop.faces;\n")
    assert "import jakarta.enterprise.context.Dependent;\nimport jakarta.inject.Named;\n" in bean.content
    assert "@Dependent\n@Named\npublic class HomeBean {" in bean.content
    assert "private String name;" in bean.content
    assert "public void setName(String name) {" in bean.content


def test_page_without_managed_bean(builder):
    [page] = builder.page("about", managed_bean=False)
    assert "outputText" not in page.content


def test_page_fills_every_template_insert(builder, webapp):
    _write(webapp, builder.template("/WEB-INF/template.xhtml", ["top", "content"]))

    page, _ = builder.page("admin/users", template="/WEB-INF/template.xhtml")
    assert page.path == "admin/users.xhtml"
    assert 'template="/WEB-INF/template.xhtml"' in page.content
    assert (
        '    <ui:define name="top">\n'
        '        <h:outputText value="#{adminUsersBean.name}"/>\n'
        "    </ui:define>\n"
    ) in page.content
    assert '<ui:define name="content">' in page.content

    [plain] = builder.page("admin/plain", template="/WEB-INF/template.xhtml", managed_bean=False)
    assert '<h:outputText value="content"/>' in plain.content


def test_page_with_missing_template(builder):
    with pytest.raises(DescriptorError):
        builder.page("home", template="/WEB-INF/missing.xhtml")
