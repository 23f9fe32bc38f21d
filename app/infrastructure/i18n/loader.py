"""Reading and writing of translation files.

Translation files are flat JSON objects (dotted key path -> string or list).
Macro definition files may be JSON or YAML.
"""

import json
from pathlib import Path
from typing import Any, Dict

import yaml

import structlog
from core.errors import TranslationFileError

logger = structlog.get_logger()

YAML_SUFFIXES = (".yml", ".yaml")


def read_json_file(path) -> Any:
    """Read and parse a JSON file.

    Args:
        path: Path of the file.

    Returns:
        The parsed JSON document.

    Raises:
        TranslationFileError: If the file is missing or is not valid JSON.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        logger.error("translation_file_not_found", file=str(path))
        raise TranslationFileError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        logger.error("translation_file_parse_error", file=str(path), error=str(e))
        raise TranslationFileError(f"Failed to parse {path}: {e}") from e

    logger.info("loaded_translation_file", file=str(path))
    return data


def write_json_file(path, data: Any) -> Path:
    """Write a document as indented UTF-8 JSON, creating parent directories.

    Args:
        path: Destination path.
        data: JSON serializable document.

    Returns:
        The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
    logger.info("wrote_translation_file", file=str(path))
    return path


def ensure_json_file(path, default_content: Any = None) -> Path:
    """Create a JSON file with default content if it does not exist yet."""
    path = Path(path)
    if not path.exists():
        write_json_file(path, {} if default_content is None else default_content)
        logger.info("created_missing_json_file", file=str(path))
    return path


def read_structured_file(path) -> Dict[str, Any]:
    """Read a JSON or YAML mapping, chosen by file suffix.

    Raises:
        TranslationFileError: If the file is missing, invalid or not a mapping.
    """
    path = Path(path)
    if path.suffix.lower() not in YAML_SUFFIXES:
        data = read_json_file(path)
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            logger.error("translation_file_not_found", file=str(path))
            raise TranslationFileError(f"File not found: {path}") from e
        except yaml.YAMLError as e:
            logger.error("yaml_parse_error", file=str(path), error=str(e))
            raise TranslationFileError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        logger.error("invalid_structured_file", file=str(path), expected="mapping")
        raise TranslationFileError(f"Expected a mapping at the top of {path}")
    return data
