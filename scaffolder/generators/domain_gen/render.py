"""Jinja2 rendering of Java sources and Faces views."""
import math
from pathlib import Path
from typing import Any, Mapping, Union
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound
from pydantic import BaseModel
from scaffolder.core.errors import TemplateNotFoundError, TemplateRenderError
from scaffolder.generators.domain_gen.naming import simple_name, uncapitalize

TEMPLATES_DIR = Path(__file__).parent / "templates"


def java_literal(value: Any) -> str:
    """Format an annotation property value as a Java literal."""
    # bool first: True is also an int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return repr(value)
    if isinstance(value, float):
        # Java has no literal for NaN or the infinities
        if not math.isfinite(value):
            raise TemplateRenderError(f"Non-finite annotation value: {value!r}")
        return repr(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, (list, tuple)):
        return "{" + ", ".join(java_literal(item) for item in value) + "}"
    raise TemplateRenderError(f"Unsupported annotation value: {value!r}")


def create_jinja_env(templates_dir: Path) -> Environment:
    # autoescape stays off: the output is Java and XHTML source, not served HTML
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["java_literal"] = java_literal
    env.filters["simple_name"] = simple_name
    env.filters["uncapitalize"] = uncapitalize
    return env


class TemplateRenderer:
    """Renders a named template with a context; holds no state besides the environment."""

    def __init__(self, templates_dir: Path | None = None):
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.env = create_jinja_env(self.templates_dir)

    def render(self, template_name: str, context: Union[BaseModel, Mapping[str, Any]]) -> str:
        """
        Render ``template_name`` with ``context``.

        Args:
            template_name: File name under the templates directory
            context: A context model or a plain mapping

        Returns:
            The rendered text

        Raises:
            TemplateNotFoundError: the template does not exist
            TemplateRenderError: a referenced key is missing or rendering failed
        """
        data = context.model_dump(mode="json") if isinstance(context, BaseModel) else dict(context)
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(f"Template not found: {template_name}") from e
        try:
            return template.render(**data)
        except TemplateRenderError:
            raise
        except TemplateError as e:
            raise TemplateRenderError(f"Error rendering {template_name}: {e}") from e
