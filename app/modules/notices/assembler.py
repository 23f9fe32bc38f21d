"""Write-back of translations into a remote notice configuration.

`apply_patch` never mutates the remote config it is given; it validates the
patch against it and returns an updated deep copy ready to be PATCHed.
"""

import copy
import json
from typing import Any, Dict, List, Mapping, Optional

from core.errors import LanguageNotEnabled, NoticeIdMismatch
from core.logging import get_module_logger
from modules.notices import fields
from modules.notices.flatten import REGULATIONS_KEY, unflatten
from utils.paths import get_path, has_path, set_path

logger = get_module_logger()


def assemble(flat_child_map: Mapping[str, Any]) -> Dict[str, Any]:
    """Build a partial notice config patch from a flat translation map."""
    return unflatten(flat_child_map)


def validate_patch(
    remote_config: Mapping[str, Any], patch: Mapping[str, Any], language: str
) -> None:
    """Check the write-back preconditions.

    Raises:
        NoticeIdMismatch: If the patch targets another notice.
        LanguageNotEnabled: If the language is not enabled on the remote notice.
    """
    remote_notice_id = remote_config.get("notice_id")
    if remote_notice_id != patch.get("notice_id"):
        logger.error(
            "notice_id_mismatch",
            remote_notice_id=remote_notice_id,
            patch_notice_id=patch.get("notice_id"),
        )
        raise NoticeIdMismatch(remote_notice_id, patch.get("notice_id"))

    enabled_languages = get_path(remote_config, "config.languages.enabled") or []
    if language not in enabled_languages:
        logger.error(
            "language_not_enabled",
            notice_id=remote_notice_id,
            language=language,
            enabled_languages=enabled_languages,
        )
        raise LanguageNotEnabled(language, remote_notice_id)


def _set_fields(
    target: Dict[str, Any],
    source: Mapping[str, Any],
    field_paths: List[str],
    language: str,
) -> int:
    count = 0
    for field_path in field_paths:
        if not has_path(source, field_path):
            continue
        set_path(target, f"{field_path}.{language}", get_path(source, field_path))
        count += 1
    return count


def _set_categories(
    categories: Optional[List[Dict[str, Any]]],
    patch_categories: Optional[List[Dict[str, Any]]],
    language: str,
) -> int:
    translations = {item.get("id"): item for item in patch_categories or []}
    count = 0
    for category in categories or []:
        translation = translations.get(category.get("id"))
        if translation:
            count += _set_fields(
                category, translation, list(fields.CATEGORY_FIELDS), language
            )
    return count


def _find_regulation_patch(
    patch: Mapping[str, Any], regulation_id: Optional[str]
) -> Optional[Dict[str, Any]]:
    for regulation in patch.get(REGULATIONS_KEY) or []:
        if regulation.get("regulation_id") == regulation_id:
            return regulation
    return None


def apply_patch(
    remote_config: Mapping[str, Any],
    patch: Mapping[str, Any],
    language: str,
    position: Optional[str] = None,
) -> Dict[str, Any]:
    """Apply translated values of a patch to the `language` slot of a remote config.

    Only fields present in the patch are written. Regulation configs are
    updated when they are the default config of their regulation, have a
    matching patch entry and already hold a non-empty `config`.

    Args:
        remote_config: Notice config fetched from the API.
        patch: Partial notice config built by `assemble`.
        language: Locale slot to write.
        position: Notice position restricting the notice text key written.

    Returns:
        An updated deep copy of `remote_config`.

    Raises:
        NoticeIdMismatch: If the patch targets another notice.
        LanguageNotEnabled: If the language is not enabled on the remote notice.
    """
    validate_patch(remote_config, patch, language)

    updated = copy.deepcopy(dict(remote_config))
    patch_config = patch.get("config") or {}
    config = updated.setdefault("config", {})

    field_count = _set_fields(config, patch_config, fields.root_fields(position), language)
    field_count += _set_categories(
        get_path(config, fields.CATEGORIES_PATH),
        get_path(patch_config, fields.CATEGORIES_PATH),
        language,
    )

    for regulation in updated.get(REGULATIONS_KEY) or []:
        regulation_id = regulation.get("regulation_id")
        if not regulation.get("is_default_regulation_config"):
            continue
        regulation_patch = _find_regulation_patch(patch, regulation_id)
        if regulation_patch is None:
            continue
        regulation_config = regulation.get("config")
        if not isinstance(regulation_config, dict) or not regulation_config:
            logger.info(
                "skipped_regulation_without_config",
                notice_id=updated.get("notice_id"),
                regulation_id=regulation_id,
            )
            continue

        patch_regulation_config = regulation_patch.get("config") or {}
        field_count += _set_fields(
            regulation_config,
            patch_regulation_config,
            fields.regulation_fields(position),
            language,
        )
        field_count += _set_categories(
            get_path(regulation_config, fields.CATEGORIES_PATH),
            get_path(patch_regulation_config, fields.CATEGORIES_PATH),
            language,
        )

    logger.info(
        "patch_applied",
        notice_id=updated.get("notice_id"),
        language=language,
        field_count=field_count,
    )
    return updated


def write_back(client, notice_config: Dict[str, Any], dry_run: bool = False) -> bool:
    """PATCH a notice config, or log a preview in dry-run mode.

    Returns:
        True if the remote config was written.
    """
    if dry_run:
        logger.info(
            "dry_run_notice_config_preview",
            config_id=notice_config.get("id"),
            notice_id=notice_config.get("notice_id"),
            notice_config=json.dumps(notice_config, ensure_ascii=False),
        )
        return False

    client.update_notice_config(notice_config)
    logger.info(
        "notice_config_written",
        config_id=notice_config.get("id"),
        notice_id=notice_config.get("notice_id"),
    )
    return True
