"""Maven dependencies added to generated projects, gated by the synchronizer."""
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional, Tuple
from scaffolder.core.workflow import JakartaVersion
from scaffolder.descriptors import pom
from scaffolder.state.synchronizer import DEPENDENCY, ConfigSynchronizer

log = logging.getLogger(__name__)

MAPSTRUCT_VERSION_PROPERTY = "org.mapstruct.version"
MAPSTRUCT_VERSION = "1.6.3"
PRIMEFACES_VERSION = "14.0.12"


@dataclass(frozen=True)
class Dependency:
    group_id: str
    artifact_id: str
    version: Optional[str] = None
    scope: Optional[str] = None
    classifier: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @classmethod
    def parse(cls, coordinates: str, scope: Optional[str] = None) -> "Dependency":
        """Parse ``group:artifact[:version]``."""
        parts = coordinates.strip().split(":")
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Expected group:artifact[:version], got {coordinates!r}")
        return cls(parts[0], parts[1], parts[2] if len(parts) == 3 else None, scope)


def persistence_dependencies(version: JakartaVersion) -> List[Dependency]:
    if version is JakartaVersion.JAKARTA_10:
        return [
            Dependency("jakarta.persistence", "jakarta.persistence-api", "3.1.0", "provided"),
            Dependency("jakarta.enterprise", "jakarta.enterprise.cdi-api", "4.0.1", "provided"),
            Dependency("jakarta.transaction", "jakarta.transaction-api", "2.0.1", "provided"),
        ]
    return [
        Dependency("jakarta.persistence", "jakarta.persistence-api", "3.2.0", "provided"),
        Dependency("jakarta.data", "jakarta.data-api", "1.0.1", "provided"),
        Dependency("jakarta.enterprise", "jakarta.enterprise.cdi-api", "4.1.0", "provided"),
        Dependency("jakarta.transaction", "jakarta.transaction-api", "2.0.1", "provided"),
    ]


def faces_dependencies(version: JakartaVersion) -> List[Dependency]:
    if version is JakartaVersion.JAKARTA_10:
        return [
            Dependency("jakarta.faces", "jakarta.faces-api", "4.0.1", "provided"),
            Dependency("jakarta.enterprise", "jakarta.enterprise.cdi-api", "4.0.1", "provided"),
        ]
    return [
        Dependency("jakarta.faces", "jakarta.faces-api", "4.1.0", "provided"),
        Dependency("jakarta.enterprise", "jakarta.enterprise.cdi-api", "4.1.0", "provided"),
    ]


def mapper_dependencies() -> List[Dependency]:
    version = f"${{{MAPSTRUCT_VERSION_PROPERTY}}}"
    return [
        Dependency("org.mapstruct", "mapstruct", version),
        Dependency("org.mapstruct", "mapstruct-processor", version, "provided"),
    ]


def validation_dependencies(version: JakartaVersion) -> List[Dependency]:
    api_version = "3.0.2" if version is JakartaVersion.JAKARTA_10 else "3.1.0"
    return [Dependency("jakarta.validation", "jakarta.validation-api", api_version, "provided")]


def primefaces_dependencies() -> List[Dependency]:
    # the jakarta classifier selects the jakarta.* namespace build
    return [Dependency("org.primefaces", "primefaces", PRIMEFACES_VERSION, classifier="jakarta")]


def apply_dependencies(
    doc: ET.ElementTree,
    dependencies: List[Dependency],
    synchronizer: ConfigSynchronizer,
) -> Tuple[List[str], List[str]]:
    """
    Add each dependency not applied before to the pom.

    Nothing is recorded here: callers record the returned ``applied`` keys
    once the pom has been saved, so a failed save is retried next run.

    Returns:
        (keys added to the pom, keys to record as applied). Dependencies
        already present in the pom are applied without touching it.
    """
    added, applied = [], []
    for dependency in dependencies:
        if synchronizer.was_applied(DEPENDENCY, dependency.key):
            continue
        if pom.add_dependency(
            doc,
            dependency.group_id,
            dependency.artifact_id,
            dependency.version,
            dependency.scope,
            dependency.classifier,
        ):
            added.append(dependency.key)
        applied.append(dependency.key)
    return added, applied


def record_dependencies(synchronizer: ConfigSynchronizer, keys: List[str]) -> None:
    for key in keys:
        synchronizer.record_applied(DEPENDENCY, key)
