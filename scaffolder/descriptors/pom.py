"""pom.xml access: project coordinates, dependencies, properties and plugins."""
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional
from scaffolder.core.errors import DescriptorError
from scaffolder.descriptors.xml import child_text, ensure_child, find_child, find_children, make_child
from scaffolder.schemas.entities import ProjectCoordinates

log = logging.getLogger(__name__)

POM_NS = "http://maven.apache.org/POM/4.0.0"


def read_coordinates(doc: ET.ElementTree) -> ProjectCoordinates:
    """
    Read groupId/artifactId of the project.

    A missing groupId is inherited from ``<parent>``.

    Raises:
        DescriptorError: either identifier cannot be found
    """
    root = doc.getroot()
    group_id = child_text(root, "groupId")
    if not group_id:
        parent = find_child(root, "parent")
        group_id = child_text(parent, "groupId") if parent is not None else None
    artifact_id = child_text(root, "artifactId")
    if not group_id or not artifact_id:
        raise DescriptorError("pom.xml must declare groupId and artifactId")
    return ProjectCoordinates(group_id=group_id, artifact_id=artifact_id)


def _matches(element: ET.Element, group_id: str, artifact_id: str) -> bool:
    return child_text(element, "groupId") == group_id and child_text(element, "artifactId") == artifact_id


def find_dependency(doc: ET.ElementTree, group_id: str, artifact_id: str) -> Optional[ET.Element]:
    dependencies = find_child(doc.getroot(), "dependencies")
    if dependencies is None:
        return None
    return next((d for d in find_children(dependencies, "dependency") if _matches(d, group_id, artifact_id)), None)


def has_dependency(doc: ET.ElementTree, group_id: str, artifact_id: str) -> bool:
    return find_dependency(doc, group_id, artifact_id) is not None


def add_dependency(
    doc: ET.ElementTree,
    group_id: str,
    artifact_id: str,
    version: Optional[str] = None,
    scope: Optional[str] = None,
    classifier: Optional[str] = None,
) -> bool:
    """Add a dependency keyed by groupId:artifactId; an existing one is left as is."""
    if has_dependency(doc, group_id, artifact_id):
        return False
    dependencies = ensure_child(doc.getroot(), "dependencies")
    dependency = make_child(dependencies, "dependency")
    for name, value in (
        ("groupId", group_id),
        ("artifactId", artifact_id),
        ("version", version),
        ("classifier", classifier),
        ("scope", scope),
    ):
        if value:
            dependency.append(make_child(dependency, name, value))
    dependencies.append(dependency)
    log.info("Added dependency %s:%s", group_id, artifact_id)
    return True


def set_property(doc: ET.ElementTree, name: str, value: str) -> bool:
    properties = ensure_child(doc.getroot(), "properties")
    element = find_child(properties, name)
    if element is None:
        properties.append(make_child(properties, name, value))
        return True
    if (element.text or "").strip() == value:
        return False
    element.text = value
    return True


def _append_configuration(parent: ET.Element, configuration: Dict[str, Any]) -> None:
    for name, value in configuration.items():
        child = make_child(parent, name)
        if isinstance(value, dict):
            _append_configuration(child, value)
        elif isinstance(value, bool):
            child.text = "true" if value else "false"
        else:
            child.text = str(value)
        parent.append(child)


def find_plugin(doc: ET.ElementTree, group_id: str, artifact_id: str) -> Optional[ET.Element]:
    build = find_child(doc.getroot(), "build")
    plugins = find_child(build, "plugins") if build is not None else None
    if plugins is None:
        return None
    return next((p for p in find_children(plugins, "plugin") if _matches(p, group_id, artifact_id)), None)


def add_plugin(
    doc: ET.ElementTree,
    group_id: str,
    artifact_id: str,
    version: Optional[str] = None,
    configuration: Optional[Dict[str, Any]] = None,
    goals: Optional[List[str]] = None,
) -> bool:
    """
    Register a build plugin, keyed by groupId:artifactId.

    Args:
        doc: pom.xml tree, mutated in place
        group_id: Plugin groupId
        artifact_id: Plugin artifactId
        version: Plugin version
        configuration: Nested mapping rendered as configuration elements
        goals: When given, the configuration goes into a single execution
            bound to these goals

    Returns:
        True if the document changed
    """
    if find_plugin(doc, group_id, artifact_id) is not None:
        return False
    build = ensure_child(doc.getroot(), "build")
    plugins = ensure_child(build, "plugins")
    plugin = make_child(plugins, "plugin")
    plugin.append(make_child(plugin, "groupId", group_id))
    plugin.append(make_child(plugin, "artifactId", artifact_id))
    if version:
        plugin.append(make_child(plugin, "version", version))

    target = plugin
    if goals:
        executions = make_child(plugin, "executions")
        execution = make_child(executions, "execution")
        goals_element = make_child(execution, "goals")
        for goal in goals:
            goals_element.append(make_child(goals_element, "goal", goal))
        execution.append(goals_element)
        executions.append(execution)
        plugin.append(executions)
        target = execution
    if configuration:
        configuration_element = make_child(target, "configuration")
        _append_configuration(configuration_element, configuration)
        target.append(configuration_element)
    plugins.append(plugin)
    log.info("Added plugin %s:%s", group_id, artifact_id)
    return True
