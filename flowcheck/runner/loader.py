"""Loader for YAML test definitions."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from flowcheck.core.exceptions import DefinitionError
from flowcheck.core.models import TestDefinition

logger = logging.getLogger(__name__)


def load_test_definition(path: Path) -> TestDefinition:
    """Load and validate a single test definition from a YAML file.

    Args:
        path: Path to YAML file

    Returns:
        TestDefinition object

    Raises:
        DefinitionError: if the file is missing, is not valid YAML, or does
            not match the test definition schema
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise DefinitionError(str(path), "file not found") from e
    except OSError as e:
        raise DefinitionError(str(path), f"cannot read file: {e}") from e
    except UnicodeDecodeError as e:
        raise DefinitionError(str(path), f"file is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise DefinitionError(str(path), f"YAML parse error: {e}") from e

    if not isinstance(data, dict):
        raise DefinitionError(str(path), "top level must be a mapping")

    try:
        definition = TestDefinition.model_validate(data)
    except ValidationError as e:
        raise DefinitionError(str(path), str(e)) from e

    logger.info(f"Loaded test: {definition.name} ({len(definition.steps)} steps)")
    return definition
