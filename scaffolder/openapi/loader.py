"""Loading, validation and registration of an OpenAPI description."""
import logging
from pathlib import Path
from typing import Any, Dict
from urllib.parse import urlparse
import httpx
import yaml
from openapi_spec_validator import validate
from openapi_spec_validator.validation.exceptions import OpenAPIValidationError, ValidatorDetectError
from scaffolder.core.errors import OpenApiError

log = logging.getLogger(__name__)

OPENAPI_FILE_NAME = "openapi.yaml"
GENERATOR_GROUP_ID = "org.openapitools"
GENERATOR_ARTIFACT_ID = "openapi-generator-maven-plugin"
GENERATOR_VERSION = "7.10.0"
GENERATOR_NAME = "jaxrs-spec"


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def read_description(location: str, timeout: float = 60.0) -> str:
    """Read a local file, or fetch the description when ``location`` is a URL."""
    if is_remote(location):
        log.info("Fetching OpenAPI description from %s", location)
        try:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                r = client.get(location)
                r.raise_for_status()
                return r.text
        except httpx.HTTPError as e:
            raise OpenApiError(f"Could not fetch {location}: {e}") from e
    try:
        return Path(location).read_text(encoding="utf-8")
    except OSError as e:
        raise OpenApiError(f"Could not read {location}: {e}") from e


def parse_description(text: str) -> Dict[str, Any]:
    """
    Parse a YAML or JSON description and validate it.

    Raises:
        OpenApiError: not YAML/JSON, not an OpenAPI document, or invalid
    """
    try:
        spec = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise OpenApiError(f"OpenAPI description is not valid YAML or JSON: {e}") from e
    if not isinstance(spec, dict) or not ("openapi" in spec or "swagger" in spec):
        raise OpenApiError("Not an OpenAPI description: missing 'openapi' version field")
    try:
        validate(spec)
    except OpenAPIValidationError as e:
        raise OpenApiError(f"Invalid OpenAPI description: {e.message}") from e
    except ValidatorDetectError as e:
        raise OpenApiError(f"Unsupported OpenAPI version: {e}") from e
    return spec


def store_description(spec: Dict[str, Any], resources_root: Path) -> Path:
    path = Path(resources_root) / OPENAPI_FILE_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(spec, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return path


def generator_configuration(resources_package: str, input_spec: str) -> Dict[str, Any]:
    """Configuration of the generator plugin: interfaces only, in the resources package."""
    return {
        "inputSpec": input_spec,
        "generatorName": GENERATOR_NAME,
        "apiPackage": resources_package,
        "modelPackage": f"{resources_package}.model",
        "configOptions": {
            "interfaceOnly": True,
            "useJakartaEe": True,
            "useSwaggerAnnotations": False,
        },
    }
