"""Migration templates and the placeholder renderer used to apply them.

Templates are loaded from ``data/templates.yaml``; list order in that file is
registration order, which decides which template wins when several match.
"""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Pattern, Union

import yaml

from .utils import setup_logging


logger = setup_logging(__name__)

DEFAULT_TEMPLATES_PATH = Path(__file__).parent / "data" / "templates.yaml"

# {{name}} or {{name | filter}}
_PLACEHOLDER_RE = re.compile(r'\{\{\s*(\w+)\s*(?:\|\s*(\w+)\s*)?\}\}')
_ENDPOINT_SEGMENT = r"(?:[\w.\-]+|\$\{\w+\})"
_ENDPOINT_RE = re.compile(r"/api/v1(?:/" + _ENDPOINT_SEGMENT + r")+")
_INTERPOLATION_RE = re.compile(r"\$\{(\w+)\}")

_FILTERS = {
    'lowercase': str.lower,
    'uppercase': str.upper,
}


@dataclass(frozen=True)
class MigrationTemplate:
    """A named detection pattern plus the code it generates."""

    key: str
    name: str
    description: str
    pattern: Pattern
    rest_template: str
    test_template: Optional[str] = None
    schema_template: Optional[str] = None

    def matches(self, usages: Iterable[str]) -> bool:
        return any(self.pattern.search(usage) for usage in usages)

    @classmethod
    def from_dict(cls, data: dict) -> 'MigrationTemplate':
        """Create a template from one entry of the templates file."""
        return cls(
            key=data['key'],
            name=data.get('name') or data['key'],
            description=data.get('description', ''),
            pattern=re.compile(data['pattern']),
            rest_template=data['rest_template'],
            test_template=data.get('test_template'),
            schema_template=data.get('schema_template'),
        )


def render_template(text: str, values: Dict[str, str]) -> str:
    """Substitute ``{{name}}`` placeholders in text.

    Placeholders without a value, or with an unknown filter, are left as-is.

    Args:
        text: Template text
        values: Placeholder name to replacement value

    Returns:
        Rendered text
    """
    def replace(match):
        name, filter_name = match.group(1), match.group(2)
        if name not in values:
            return match.group(0)
        value = values[name]
        if filter_name:
            apply_filter = _FILTERS.get(filter_name)
            if apply_filter is None:
                return match.group(0)
            value = apply_filter(value)
        return value

    return _PLACEHOLDER_RE.sub(replace, text)


def apply_template(template: MigrationTemplate, feature_name: str) -> str:
    """Render a template for a feature into a single script.

    The REST body and test scaffold use the lower-cased feature name for both
    entityName and functionName; the schema keeps the original casing.
    """
    lowered = feature_name.lower()
    code_values = {'entityName': lowered, 'functionName': lowered}

    script = render_template(template.rest_template, code_values)

    if template.test_template:
        script += '\n\n' + render_template(template.test_template, code_values)

    if template.schema_template:
        script += '\n\n' + render_template(template.schema_template, {'entityName': feature_name})

    return script


def extract_endpoints(code: str) -> List[str]:
    """Return the distinct /api/v1 endpoints referenced in generated code, in order."""
    endpoints: List[str] = []
    for match in _ENDPOINT_RE.finditer(code):
        endpoint = _INTERPOLATION_RE.sub(r":\1", match.group(0))
        if endpoint not in endpoints:
            endpoints.append(endpoint)
    return endpoints


def load_templates(path: Union[str, Path, None] = None) -> List[MigrationTemplate]:
    """Load the template library.

    Args:
        path: Templates YAML file (defaults to the packaged library)

    Returns:
        Templates in registration order
    """
    templates_path = Path(path) if path else DEFAULT_TEMPLATES_PATH
    try:
        with open(templates_path, 'r', encoding='utf-8') as f:
            entries = yaml.safe_load(f) or []
    except FileNotFoundError as exc:
        logger.error("Templates file not found: %s", templates_path)
        raise FileNotFoundError(f"Templates file not found: {templates_path}") from exc
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to load templates from %s: %s", templates_path, exc)
        raise RuntimeError(f"Failed to load templates from {templates_path}") from exc

    templates = [MigrationTemplate.from_dict(entry) for entry in entries]
    logger.debug(f"Loaded {len(templates)} migration templates from {templates_path}")
    return templates
