"""Exception hierarchy for the scaffolding pipeline."""


class ScaffolderError(Exception):
    """Base class for every error raised by the scaffolder."""


class SchemaError(ScaffolderError):
    """The entity definition document (or one entity in it) is malformed."""

    def __init__(self, message: str, entity: str | None = None):
        super().__init__(message)
        self.entity = entity


class TemplateNotFoundError(ScaffolderError):
    pass


class TemplateRenderError(ScaffolderError):
    pass


class DescriptorError(ScaffolderError):
    """An XML descriptor lacks an expected anchor or holds conflicting config."""


class PersistenceUnitNotFoundError(DescriptorError):
    def __init__(self, unit_name: str):
        super().__init__(f"Persistence unit not found: {unit_name}")
        self.unit_name = unit_name


class ServletConfigConflictError(DescriptorError):
    pass


class FileWriteError(ScaffolderError):
    """A generated file could not be written; ``results`` holds the files handled before it."""

    def __init__(self, path, cause: Exception, results=None):
        super().__init__(f"Could not write {path}: {cause}")
        self.path = path
        self.results = list(results or [])


class StateFileError(ScaffolderError):
    pass


class DataSourceNameError(ScaffolderError, ValueError):
    pass


class OpenApiError(ScaffolderError):
    pass


class ProjectNotFoundError(DescriptorError):
    """The project directory has no readable pom.xml."""
