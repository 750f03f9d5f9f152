"""Shared fixtures: a minimal Maven project on disk."""
import pytest
from scaffolder.core.config import Settings

POM_XML = """<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 https://maven.apache.org/xsd/maven-4.0.0.xsd">
    <modelVersion>4.0.0</modelVersion>
    <groupId>com.acme</groupId>
    <artifactId>shop</artifactId>
    <version>1.0-SNAPSHOT</version>
    <packaging>war</packaging>
    <!-- project dependencies -->
    <dependencies>
        <dependency>
            <groupId>jakarta.platform</groupId>
            <artifactId>jakarta.jakartaee-api</artifactId>
            <version>11.0.0</version>
            <scope>provided</scope>
        </dependency>
    </dependencies>
</project>
"""


@pytest.fixture
def project_dir(tmp_path):
    """A project directory holding only pom.xml (com.acme:shop)."""
    (tmp_path / "pom.xml").write_text(POM_XML, encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings():
    return Settings(jakarta_ee_version="11", state_file=".scaffolder-state.json")
