"""Command line entry point.

Usage: scaffolder <command> [options]

Exit codes: 0 success, 1 an entity or a step failed, 2 fatal error
(malformed entity document, missing pom.xml, invalid arguments).
"""
import argparse
import json
import logging
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional
from scaffolder.core.config import Settings, settings as default_settings
from scaffolder.core.engine import GenerationPipeline
from scaffolder.core.errors import (
    DataSourceNameError,
    DescriptorError,
    ProjectNotFoundError,
    SchemaError,
    ScaffolderError,
    StateFileError,
)
from scaffolder.core.logging import configure_logging
from scaffolder.core.workflow import JakartaVersion
from scaffolder.datasource.creators import (
    DECLARE_CLASS,
    DECLARE_WEB,
    DEFAULT_DATA_SOURCE_CLASS,
    DEFAULT_DRIVER,
    DataSourceParameters,
    data_source_creator,
    validate_data_source_name,
)
from scaffolder.descriptors import persistence, pom, web
from scaffolder.descriptors.dependencies import (
    Dependency,
    apply_dependencies,
    faces_dependencies,
    persistence_dependencies,
    primefaces_dependencies,
    record_dependencies,
    validation_dependencies,
)
from scaffolder.descriptors.xml import load_document, save_document
from scaffolder.faces.forms import MESSAGES_FILE, FormBuilder, load_forms, merge_messages
from scaffolder.faces.pages import FacePageBuilder
from scaffolder.generators.domain_gen.naming import Layer, derive_package
from scaffolder.generators.domain_gen.render import TemplateRenderer
from scaffolder.generators.domain_gen.repository import RepositoryBuilder
from scaffolder.generators.domain_gen.schema import load_schema_document, parse_entities
from scaffolder.generators.domain_gen.types import GenerationOptions, GenerationReport, WriteResult, WriteStatus
from scaffolder.generators.domain_gen.writer import write_files
from scaffolder.openapi import loader
from scaffolder.schemas.entities import ProjectCoordinates
from scaffolder.state.synchronizer import JDBC, PLUGIN, ConfigSynchronizer

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


class Project:
    """Paths and shared collaborators of the project a command works on."""

    def __init__(self, project_dir: Path, settings: Settings):
        self.dir = Path(project_dir)
        self.settings = settings
        self.pom_path = self.dir / "pom.xml"
        if not self.pom_path.is_file():
            raise ProjectNotFoundError(f"No pom.xml in {self.dir}")
        try:
            self.pom = load_document(self.pom_path)
            self.coordinates: ProjectCoordinates = pom.read_coordinates(self.pom)
        except DescriptorError as e:
            raise ProjectNotFoundError(f"Unusable pom.xml in {self.dir}: {e}") from e
        self.synchronizer = ConfigSynchronizer(self.dir / settings.state_file).load()

    @property
    def resources_root(self) -> Path:
        return self.dir / self.settings.resources_dir

    @property
    def java_root(self) -> Path:
        return self.dir / self.settings.java_source_dir

    @property
    def webapp_root(self) -> Path:
        return self.dir / self.settings.webapp_dir

    @property
    def persistence_xml(self) -> Path:
        return self.resources_root / "META-INF" / "persistence.xml"

    @property
    def web_xml(self) -> Path:
        return self.webapp_root / "WEB-INF" / "web.xml"

    @property
    def version(self) -> JakartaVersion:
        return JakartaVersion.parse(self.settings.jakarta_ee_version)

    def add_dependencies(self, dependencies: List[Dependency]) -> List[str]:
        added, applied = apply_dependencies(self.pom, dependencies, self.synchronizer)
        if added:
            save_document(self.pom, self.pom_path)
        record_dependencies(self.synchronizer, applied)
        return added


def _load_or_create(path: Path, factory) -> ET.ElementTree:
    return load_document(path) if path.exists() else factory()


def _pipeline(project: Project, options: GenerationOptions) -> GenerationPipeline:
    return GenerationPipeline(
        settings=project.settings,
        renderer=TemplateRenderer(),
        repository_builder=RepositoryBuilder(project.version),
        synchronizer=project.synchronizer,
        project_dir=project.dir,
        options=options,
    )


def _print_report(report: GenerationReport) -> None:
    for outcome in report.outcomes:
        if outcome.ok:
            print(f"{outcome.entity}: {len(outcome.written)} written, {len(outcome.preserved)} preserved")
            for path in outcome.written:
                print(f"  {path}")
        else:
            print(f"{outcome.entity}: FAILED - {'; '.join(outcome.errors)}")
    for error in report.errors:
        print(f"FAILED - {error}")


def _print_results(results: List[WriteResult]) -> None:
    for result in results:
        if result.status is WriteStatus.PRESERVED:
            log.warning("%s already exists, left as is", result.path)
        print(f"{result.status.value}: {result.path}")


def cmd_add_entities(args, project: Project) -> int:
    options = GenerationOptions(
        managed_beans=args.managed_beans,
        faces_template=args.faces_template,
        faces_define=args.faces_define,
    )
    entities_text = Path(args.entities_file).read_text(encoding="utf-8")
    report = _pipeline(project, options).run(entities_text, project.coordinates)
    _print_report(report)
    return EXIT_OK if report.ok else EXIT_FAILED


def cmd_add_persistence(args, project: Project) -> int:
    unit_name = args.persistence_unit or project.settings.persistence_unit
    doc = _load_or_create(project.persistence_xml, persistence.create_persistence_document)
    if persistence.ensure_persistence_unit(doc, unit_name):
        save_document(doc, project.persistence_xml)
        log.info("Persistence unit %s ready in %s", unit_name, project.persistence_xml)
    project.add_dependencies(persistence_dependencies(project.version))
    project.synchronizer.save()
    return EXIT_OK


def cmd_add_datasource(args, project: Project) -> int:
    jndi_name = validate_data_source_name(args.declare, args.name)
    if project.synchronizer.was_applied(JDBC, jndi_name):
        log.info("Datasource %s already declared", jndi_name)
        return EXIT_OK

    parameters = DataSourceParameters(
        name=jndi_name,
        class_name=args.class_name,
        server_name=args.server_name,
        port_number=args.port_number,
        url=args.url,
        user=args.user,
        password=args.password,
        properties=[p.strip() for p in (args.properties or "").split(",") if p.strip()],
    )
    creator = data_source_creator(
        args.declare,
        project.dir,
        TemplateRenderer(),
        project.coordinates,
        project.settings.java_source_dir,
        project.settings.webapp_dir,
    )
    creator.create(parameters)

    status = EXIT_OK
    if args.persistence_unit:
        try:
            doc = load_document(project.persistence_xml) if project.persistence_xml.exists() else None
            if doc is None:
                raise DescriptorError(f"No persistence.xml in {project.resources_root}")
            if persistence.add_data_source_reference(doc, args.persistence_unit, jndi_name):
                save_document(doc, project.persistence_xml)
        except ScaffolderError as e:
            log.error("Datasource declared but not referenced: %s", e)
            status = EXIT_FAILED

    if args.coordinates_jdbc:
        project.add_dependencies([Dependency.parse(args.coordinates_jdbc, scope="runtime")])
    if status == EXIT_OK:
        # a failed reference is retried on the next run
        project.synchronizer.record_applied(JDBC, jndi_name)
    project.synchronizer.save()
    return status


def cmd_add_faces(args, project: Project) -> int:
    project.add_dependencies(faces_dependencies(project.version))
    doc = _load_or_create(project.web_xml, web.create_web_document)
    changed = web.add_faces_servlet(doc, args.url_pattern, args.servlet_name)
    changed = web.add_welcome_file(doc, args.welcome_file) or changed
    if changed:
        save_document(doc, project.web_xml)
    project.synchronizer.save()
    return EXIT_OK


def cmd_add_validation_api(args, project: Project) -> int:
    project.add_dependencies(validation_dependencies(project.version))
    project.synchronizer.save()
    return EXIT_OK


def cmd_add_face_template(args, project: Project) -> int:
    inserts = [name.strip() for name in args.inserts.split(",") if name.strip()]
    builder = FacePageBuilder(TemplateRenderer(), project.coordinates, project.webapp_root)
    _print_results(write_files([builder.template(args.name, inserts)], project.java_root, project.webapp_root))
    return EXIT_OK


def cmd_add_face_page(args, project: Project) -> int:
    builder = FacePageBuilder(TemplateRenderer(), project.coordinates, project.webapp_root)
    files = builder.page(args.name, args.template, args.managed_bean)
    _print_results(write_files(files, project.java_root, project.webapp_root))
    return EXIT_OK


def cmd_add_forms_from_entities(args, project: Project) -> int:
    forms = load_forms(Path(args.forms_file).read_text(encoding="utf-8"))
    if not forms:
        raise SchemaError(f"No forms defined in {args.forms_file}")
    entities_text = Path(args.entities_file).read_text(encoding="utf-8")
    entities = {entity.name: entity for entity in parse_entities(entities_text)}

    # every form is checked before anything is written
    builder = FormBuilder(TemplateRenderer(), project.coordinates)
    planned = []
    for form in forms:
        entity = entities.get(form.entity)
        if entity is None:
            raise SchemaError(f"Form {form.name}: unknown entity {form.entity}")
        planned.append((form, entity, builder.build(form, entity)))

    referenced = {form.entity for form in forms}
    document = {"entities": [raw for raw in load_schema_document(entities_text) if raw.get("name") in referenced]}
    report = _pipeline(project, GenerationOptions()).run(json.dumps(document), project.coordinates)
    _print_report(report)

    # the pipeline saved its own copy of pom.xml
    project.pom = load_document(project.pom_path)
    project.add_dependencies(primefaces_dependencies())
    messages_path = project.resources_root / MESSAGES_FILE
    for form, entity, files in planned:
        merge_messages(messages_path, builder.messages(form, entity))
        _print_results(write_files(files, project.java_root, project.webapp_root))
    project.synchronizer.save()
    return EXIT_OK if report.ok else EXIT_FAILED


def cmd_create_openapi(args, project: Project) -> int:
    text = loader.read_description(args.openapi, timeout=project.settings.http_timeout)
    spec = loader.parse_description(text)
    path = loader.store_description(spec, project.resources_root)
    log.info("Stored OpenAPI description in %s", path)

    plugin_key = f"{loader.GENERATOR_GROUP_ID}:{loader.GENERATOR_ARTIFACT_ID}"
    if not project.synchronizer.was_applied(PLUGIN, plugin_key):
        resources_package = derive_package(
            project.coordinates.group_id, project.coordinates.artifact_id, Layer.RESOURCES
        )
        input_spec = f"${{project.basedir}}/{project.settings.resources_dir}/{loader.OPENAPI_FILE_NAME}"
        if pom.add_plugin(
            project.pom,
            loader.GENERATOR_GROUP_ID,
            loader.GENERATOR_ARTIFACT_ID,
            loader.GENERATOR_VERSION,
            configuration=loader.generator_configuration(resources_package, input_spec),
            goals=["generate"],
        ):
            save_document(project.pom, project.pom_path)
        project.synchronizer.record_applied(PLUGIN, plugin_key)
        project.synchronizer.save()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scaffolder", description="Scaffold Jakarta EE projects")
    parser.add_argument("--project-dir", default=".", help="Directory holding pom.xml (default: current)")
    parser.add_argument("--jakarta-ee", help="Target Jakarta EE version, 10 or 11 (default from settings)")
    parser.add_argument("--log-level", help="Logging level (default from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add-entities", help="Generate entities, repositories, mappers and services")
    p.add_argument("entities_file", help="JSON file with the entity definitions")
    p.add_argument("--managed-beans", action="store_true", help="Also generate Faces managed beans")
    p.add_argument("--faces-template", help="Facelet template; enables CRUD views")
    p.add_argument("--faces-define", default="content", help="ui:define name used by the CRUD views")
    p.set_defaults(handler=cmd_add_entities)

    p = sub.add_parser("add-persistence", help="Create persistence.xml and add the persistence APIs")
    p.add_argument("--persistence-unit", help="Persistence unit name (default from settings)")
    p.set_defaults(handler=cmd_add_persistence)

    p = sub.add_parser("add-datasource", help="Declare a datasource")
    p.add_argument("--name", required=True, help="Datasource name, without JNDI prefix")
    p.add_argument("--declare", choices=[DECLARE_WEB, DECLARE_CLASS], default=DECLARE_WEB)
    p.add_argument("--coordinates-jdbc", default=DEFAULT_DRIVER, help="JDBC driver as group:artifact[:version]")
    p.add_argument("--class-name", default=DEFAULT_DATA_SOURCE_CLASS)
    p.add_argument("--url")
    p.add_argument("--user")
    p.add_argument("--password")
    p.add_argument("--server-name")
    p.add_argument("--port-number", type=int)
    p.add_argument("--properties", help="Comma separated key=value pairs")
    p.add_argument("--persistence-unit", help="Reference the datasource from this persistence unit")
    p.set_defaults(handler=cmd_add_datasource)

    p = sub.add_parser("add-faces", help="Configure Jakarta Faces")
    p.add_argument("--url-pattern", default=web.DEFAULT_URL_PATTERN)
    p.add_argument("--servlet-name", default=web.DEFAULT_SERVLET_NAME)
    p.add_argument("--welcome-file", default=web.DEFAULT_WELCOME_FILE)
    p.set_defaults(handler=cmd_add_faces)

    p = sub.add_parser("add-validation-api", help="Add the Jakarta Validation API dependency")
    p.set_defaults(handler=cmd_add_validation_api)

    p = sub.add_parser("add-face-template", help="Create a facelet template with insert points")
    p.add_argument("--name", required=True, help="Template path under the webapp, e.g. /WEB-INF/template.xhtml")
    p.add_argument("--inserts", default="top,content,bottom", help="Comma separated ui:insert names")
    p.set_defaults(handler=cmd_add_face_template)

    p = sub.add_parser("add-face-page", help="Create a Faces page, optionally backed by a managed bean")
    p.add_argument("--name", required=True, help="Page path under the webapp, without extension")
    p.add_argument("--template", help="Facelet template the page composes")
    p.add_argument("--managed-bean", action=argparse.BooleanOptionalAction, default=True)
    p.set_defaults(handler=cmd_add_face_page)

    p = sub.add_parser("add-forms-from-entities", help="Create PrimeFaces forms for entities")
    p.add_argument("--forms-file", required=True, help="JSON file describing the forms")
    p.add_argument("--entities-file", required=True, help="JSON file with the entity definitions")
    p.set_defaults(handler=cmd_add_forms_from_entities)

    p = sub.add_parser("create-openapi", help="Store an OpenAPI description and register the generator")
    p.add_argument("--openapi", required=True, help="Path or URL of the OpenAPI description")
    p.set_defaults(handler=cmd_create_openapi)
    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings or default_settings
    overrides = {}
    if args.jakarta_ee:
        overrides["jakarta_ee_version"] = args.jakarta_ee
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        settings = settings.model_copy(update=overrides)
    configure_logging(settings.log_level)
    log.debug("%s: %s", settings.app_name, args.command)

    try:
        JakartaVersion.parse(settings.jakarta_ee_version)
    except ValueError:
        print(f"Unsupported Jakarta EE version: {settings.jakarta_ee_version}", file=sys.stderr)
        return EXIT_FATAL

    try:
        project = Project(Path(args.project_dir), settings)
        return args.handler(args, project)
    except (SchemaError, ProjectNotFoundError, DataSourceNameError, StateFileError) as e:
        log.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL
    except ScaffolderError as e:
        log.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED
    except (OSError, ValueError) as e:
        log.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
