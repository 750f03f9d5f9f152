"""Dataclasses for domain-model generation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
from scaffolder.generators.domain_gen.naming import Layer


class WriteStatus(str, Enum):
    WRITTEN = "written"
    UNCHANGED = "unchanged"
    PRESERVED = "preserved"


@dataclass
class GeneratedFile:
    """Represents a generated file."""
    path: str  # Relative to the Java source root, or the webapp root for views
    content: str
    layer: Layer
    preserve_existing: bool = False  # never overwrite a hand-edited copy

    @property
    def is_view(self) -> bool:
        return self.path.endswith(".xhtml")


@dataclass
class WriteResult:
    path: str
    status: WriteStatus


@dataclass
class GenerationOptions:
    """Optional artifacts requested for a generation run."""
    managed_beans: bool = False
    faces_template: Optional[str] = None  # facelet template; enables CRUD views
    faces_define: str = "content"


@dataclass
class EntityOutcome:
    """Result of generating the artifact set of one entity."""
    entity: str
    ok: bool = True
    written: List[str] = field(default_factory=list)
    preserved: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def fail(self, message: str) -> None:
        self.ok = False
        self.errors.append(message)


@dataclass
class GenerationReport:
    """Aggregate result returned to the command layer."""
    outcomes: List[EntityOutcome] = field(default_factory=list)
    merged: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)  # step-level failures (descriptor merges)

    @property
    def ok(self) -> bool:
        return not self.errors and all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> List[EntityOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def written(self) -> List[str]:
        return [path for o in self.outcomes for path in o.written]
