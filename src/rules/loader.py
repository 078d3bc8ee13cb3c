import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.components.settings.component import check_definition
from src.components.settings.errors import ConfigurationError
from src.rules.models import SettingsDefinition

logger = logging.getLogger(__name__)


def option_group_from_path(path: Path) -> str:
    """Derive an option group slug from a definition file name."""
    return re.sub(r"[^a-z0-9]+", "", path.stem, flags=re.IGNORECASE)


def _strip_fences(content: str) -> str:
    # Robustly strip markdown code fences
    lines = content.splitlines()
    yaml_lines = []
    in_block = False
    found_block = False

    for line in lines:
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break

        if in_block:
            yaml_lines.append(line)

    if found_block:
        return "\n".join(yaml_lines)
    return content


def parse_definition(data: Any) -> SettingsDefinition:
    """
    Validate raw definition data.

    Accepts either a mapping with `sections` (and optionally `tabs`/`page`)
    or a bare list of sections. Anything else is a ConfigurationError.
    """
    if isinstance(data, SettingsDefinition):
        check_definition(data)
        return data
    if isinstance(data, list):
        data = {"sections": data}
    if not isinstance(data, dict):
        raise ConfigurationError("Settings definition must be a mapping or a list of sections")
    if "sections" not in data:
        raise ConfigurationError("Settings definition has no 'sections'")

    try:
        definition = SettingsDefinition.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Settings definition validation failed:\n{e}") from e

    check_definition(definition)
    return definition


def load_definition(path: Path, option_group: str | None = None) -> SettingsDefinition:
    """
    Load and validate a settings definition file.
    Raises FileNotFoundError if file missing.
    Raises ConfigurationError if YAML or schema invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Settings definition not found at: {path}")

    with open(path, encoding="utf-8") as f:
        content = f.read()

    try:
        data = yaml.safe_load(_strip_fences(content))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {path.name}: {e}") from e

    definition = parse_definition(data)
    if option_group:
        definition.option_group = option_group
    elif not definition.option_group:
        definition.option_group = option_group_from_path(path)

    if not definition.option_group:
        raise ConfigurationError(f"Could not derive an option group for {path.name}")

    logger.info(
        "Loaded settings definition %s (%d sections)",
        definition.option_group,
        len(definition.sections),
    )
    return definition


def load_definitions(directory: Path) -> dict[str, SettingsDefinition]:
    """Load every *.yaml / *.yml definition in a directory, keyed by option group."""
    definitions: dict[str, SettingsDefinition] = {}
    if not directory.is_dir():
        logger.warning("Definitions directory %s does not exist", directory)
        return definitions

    for path in sorted([*directory.glob("*.yaml"), *directory.glob("*.yml")]):
        definition = load_definition(path)
        assert definition.option_group is not None
        if definition.option_group in definitions:
            raise ConfigurationError(f"Option group '{definition.option_group}' defined twice")
        definitions[definition.option_group] = definition
    return definitions
