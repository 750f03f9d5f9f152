from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Optional, Tuple
from scaffolder.core.config import Settings
from scaffolder.core.errors import DescriptorError, FileWriteError, SchemaError, ScaffolderError, StateFileError
from scaffolder.core.workflow import PipelineStage
from scaffolder.descriptors import pom
from scaffolder.descriptors.dependencies import (
    MAPSTRUCT_VERSION,
    MAPSTRUCT_VERSION_PROPERTY,
    apply_dependencies,
    mapper_dependencies,
    record_dependencies,
)
from scaffolder.descriptors.xml import load_document, save_document
from scaffolder.generators.domain_gen.generator import ArtifactEmitter
from scaffolder.generators.domain_gen.naming import package_set
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.repository import RepositoryBuilder
from scaffolder.generators.domain_gen.schema import load_schema_document, parse_entity
from scaffolder.generators.domain_gen.types import EntityOutcome, GenerationOptions, GenerationReport, WriteResult, WriteStatus
from scaffolder.generators.domain_gen.writer import write_files
from scaffolder.schemas.entities import EntityDescriptor, ProjectCoordinates
from scaffolder.state.synchronizer import DEPENDENCY, ConfigSynchronizer

log = logging.getLogger(__name__)


def _collect(outcome: EntityOutcome, results: List[WriteResult]) -> None:
    for result in results:
        if result.status is WriteStatus.PRESERVED:
            outcome.preserved.append(result.path)
        elif result.status is WriteStatus.WRITTEN:
            outcome.written.append(result.path)


class GenerationPipeline:
    """
    One generation run over an entity definition document.

    Stages: IDLE, VALIDATING, DERIVING, RENDERING, MERGING, PERSISTING, DONE.
    A malformed document moves to FAILED before anything is written. A
    malformed entity, or one whose artifacts fail to render or write, is
    reported as failed while its siblings carry on.
    """

    def __init__(
        self,
        settings: Settings,
        renderer: TemplateRenderer,
        repository_builder: RepositoryBuilder,
        synchronizer: ConfigSynchronizer,
        project_dir: Path,
        options: Optional[GenerationOptions] = None,
    ):
        self.settings = settings
        self.emitter = ArtifactEmitter(renderer, repository_builder)
        self.synchronizer = synchronizer
        self.project_dir = Path(project_dir)
        self.options = options or GenerationOptions()
        self.stage = PipelineStage.IDLE
        self.history: List[PipelineStage] = [PipelineStage.IDLE]

    @property
    def java_root(self) -> Path:
        return self.project_dir / self.settings.java_source_dir

    @property
    def webapp_root(self) -> Path:
        return self.project_dir / self.settings.webapp_dir

    @property
    def pom_path(self) -> Path:
        return self.project_dir / "pom.xml"

    def _set_stage(self, stage: PipelineStage) -> None:
        self.stage = stage
        self.history.append(stage)
        log.debug("Pipeline stage %s", stage.value, extra={"step": stage.value})

    def run(self, entities_text: str, coordinates: ProjectCoordinates) -> GenerationReport:
        """
        Generate every entity of ``entities_text`` into the project.

        Raises:
            SchemaError: the document itself is malformed; nothing was written
        """
        report = GenerationReport()

        self._set_stage(PipelineStage.VALIDATING)
        try:
            entities = self._validate(entities_text, report)
        except SchemaError:
            self._set_stage(PipelineStage.FAILED)
            raise

        self._set_stage(PipelineStage.DERIVING)
        for layer, package in package_set(coordinates.group_id, coordinates.artifact_id).items():
            log.debug("%s package: %s", layer.value, package, extra={"step": PipelineStage.DERIVING.value})

        self._set_stage(PipelineStage.RENDERING)
        for entity, outcome in entities:
            self._generate(entity, outcome, coordinates)

        self._set_stage(PipelineStage.MERGING)
        if any(o.ok for o in report.outcomes):
            self._merge(report)

        self._set_stage(PipelineStage.PERSISTING)
        try:
            self.synchronizer.save()
        except (StateFileError, OSError) as e:
            log.error("Could not persist state: %s", e, extra={"step": PipelineStage.PERSISTING.value})
            report.errors.append(f"state: {e}")

        self._set_stage(PipelineStage.DONE)
        for failure in report.failures:
            log.error("Entity failed: %s", "; ".join(failure.errors), extra={"entity": failure.entity})
        log.info(
            "Generated %d files, %d entities failed",
            len(report.written),
            len(report.failures),
            extra={"step": PipelineStage.DONE.value},
        )
        return report

    def _validate(self, entities_text: str, report: GenerationReport) -> List[Tuple[EntityDescriptor, EntityOutcome]]:
        raw_entities = load_schema_document(entities_text)
        if not raw_entities:
            raise SchemaError("No entities defined")

        valid = []
        seen = set()
        for position, raw in enumerate(raw_entities, start=1):
            try:
                entity = parse_entity(raw, position)
                if entity.name in seen:
                    raise SchemaError(f"{entity.name}: duplicated entity name", entity=entity.name)
            except SchemaError as e:
                outcome = EntityOutcome(entity=e.entity or f"entity #{position}")
                outcome.fail(str(e))
                report.outcomes.append(outcome)
                log.warning("Skipping entity: %s", e, extra={"entity": outcome.entity, "step": PipelineStage.VALIDATING.value})
                continue
            seen.add(entity.name)
            outcome = EntityOutcome(entity=entity.name)
            report.outcomes.append(outcome)
            valid.append((entity, outcome))
        return valid

    def _generate(self, entity: EntityDescriptor, outcome: EntityOutcome, coordinates: ProjectCoordinates) -> None:
        extra = {"entity": entity.name, "step": PipelineStage.RENDERING.value}
        try:
            # render everything first so a template error leaves no partial set
            files = self.emitter.generate_entity_artifacts(entity, coordinates, self.options)
            results = write_files(files, self.java_root, self.webapp_root)
        except FileWriteError as e:
            # files written before the failure stay on disk and are reported
            _collect(outcome, e.results)
            log.error("Generation failed after %d files: %s", len(outcome.written), e, extra=extra)
            outcome.fail(str(e))
            return
        except ScaffolderError as e:
            log.error("Generation failed: %s", e, extra=extra)
            outcome.fail(str(e))
            return
        _collect(outcome, results)
        log.info("Wrote %d files", len(outcome.written), extra=extra)

    def _merge(self, report: GenerationReport) -> None:
        extra = {"step": PipelineStage.MERGING.value}
        if not self.pom_path.exists():
            log.warning("No pom.xml in %s, mapper dependencies not added", self.project_dir, extra=extra)
            return
        try:
            doc = load_document(self.pom_path)
            changed = False
            if not self.synchronizer.was_applied(DEPENDENCY, "org.mapstruct:mapstruct"):
                changed = pom.set_property(doc, MAPSTRUCT_VERSION_PROPERTY, MAPSTRUCT_VERSION)
            added, applied = apply_dependencies(doc, mapper_dependencies(), self.synchronizer)
            if changed or added:
                save_document(doc, self.pom_path)
        except (DescriptorError, StateFileError, OSError) as e:
            log.error("pom.xml merge failed: %s", e, extra=extra)
            report.errors.append(f"pom.xml: {e}")
            return
        record_dependencies(self.synchronizer, applied)
        report.merged.extend(f"pom.xml: {key}" for key in added)
