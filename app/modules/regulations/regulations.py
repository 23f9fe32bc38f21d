"""Pull and push of one regulation's default configuration.

The pulled file is the regulation config as returned by the API. It is
edited locally and pushed back only if the remote default regulation config
has not been replaced in the meantime.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from core.errors import NotFound, RegulationConfigMismatch, TranslationFileError
from core.logging import get_module_logger
from infrastructure.i18n import read_json_file, write_json_file
from modules.notices.assembler import write_back
from modules.notices.fields import regulation_fields
from utils.paths import get_path, set_path

logger = get_module_logger()


def regulation_file_path(directory, regulation_id: str) -> Path:
    return Path(directory) / f"{regulation_id}.json"


def find_default_regulation_index(
    notice_config: Mapping[str, Any], regulation_id: str
) -> int:
    """Index of the default config of a regulation in a notice config.

    Raises:
        NotFound: If the notice has no default config for the regulation.
    """
    for index, regulation in enumerate(
        notice_config.get("regulation_configurations") or []
    ):
        if (
            regulation.get("is_default_regulation_config")
            and regulation.get("regulation_id") == regulation_id
        ):
            return index
    raise NotFound(
        f"Default regulation configuration {regulation_id} not found for "
        f"notice {notice_config.get('notice_id')}"
    )


def pull_regulation_config(client, notice_id: str, regulation_id: str, directory) -> Path:
    """Save the default regulation config of a notice's draft to `<regulation_id>.json`."""
    notice_config = client.get_draft_notice_config(notice_id)
    index = find_default_regulation_index(notice_config, regulation_id)
    path = write_json_file(
        regulation_file_path(directory, regulation_id),
        notice_config["regulation_configurations"][index],
    )
    logger.info(
        "regulation_config_pulled",
        notice_id=notice_id,
        regulation_id=regulation_id,
        file=str(path),
    )
    return path


def merge_regulation_content(
    regulation_config: Dict[str, Any],
    local_config: Mapping[str, Any],
    language: Optional[str] = None,
) -> Tuple[Dict[str, Any], int]:
    """Copy the translatable content of a local regulation config.

    Every LocaleMap is copied as a whole, or only its `language` entry when a
    language is given.

    Returns:
        The updated regulation config copy and the number of fields copied.
    """
    updated = copy.deepcopy(regulation_config)
    count = 0
    for field_path in regulation_fields():
        local_value = get_path(local_config, f"config.{field_path}")
        if not isinstance(local_value, Mapping):
            continue
        if language is None:
            set_path(updated, f"config.{field_path}", dict(local_value))
            count += 1
        elif language in local_value:
            set_path(updated, f"config.{field_path}.{language}", local_value[language])
            count += 1
    return updated, count


def push_regulation_config(
    client,
    notice_id: str,
    regulation_id: str,
    directory,
    language: Optional[str] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Push the content of a pulled regulation config file.

    Raises:
        RegulationConfigMismatch: If the file was pulled from another
            regulation config than the current remote default one.
        NotFound: If the remote notice has no default config for the regulation.
    """
    path = regulation_file_path(directory, regulation_id)
    local_config = read_json_file(path)
    if not isinstance(local_config, dict):
        raise TranslationFileError(f"Expected a regulation config object in {path}")
    notice_config = client.get_draft_notice_config(notice_id)
    index = find_default_regulation_index(notice_config, regulation_id)
    remote_regulation = notice_config["regulation_configurations"][index]

    if remote_regulation.get("id") != local_config.get("id"):
        logger.error(
            "regulation_config_mismatch",
            local_id=local_config.get("id"),
            remote_id=remote_regulation.get("id"),
        )
        raise RegulationConfigMismatch(local_config.get("id"), remote_regulation.get("id"))

    merged, field_count = merge_regulation_content(
        remote_regulation, local_config, language
    )
    updated = copy.deepcopy(notice_config)
    updated["regulation_configurations"][index] = merged

    write_back(client, updated, dry_run=dry_run)
    logger.info(
        "regulation_config_pushed",
        notice_id=notice_id,
        regulation_id=regulation_id,
        regulation_config_id=remote_regulation.get("id"),
        field_count=field_count,
        dry_run=dry_run,
    )
    return updated
