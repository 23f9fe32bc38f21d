"""Flattening of notice configurations into dotted-key translation maps.

A flat translation map holds one entry per translatable leaf:

    {
        "notice.<notice_id>.config.notice.content.popup": "Welcome",
        "notice.<notice_id>.config.preferences.categories.<id>.name": "Ads",
        "notice.<notice_id>.regulation_configurations.gdpr.config.notice.content.deny": "Deny",
    }

`unflatten` rebuilds the nested shape consumed by the assembler.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.errors import TranslationFileError
from core.logging import get_module_logger
from infrastructure.i18n import LocaleResolver
from modules.notices import fields
from utils.paths import get_path, set_path

logger = get_module_logger()

NOTICE_PREFIX = "notice"
REGULATIONS_KEY = "regulation_configurations"

_REGULATION_SEGMENT = re.compile(rf"\.{REGULATIONS_KEY}\.([^.]+)\.")


def root_key(notice_id: str) -> str:
    """Root key of all entries of a notice."""
    return f"{NOTICE_PREFIX}.{notice_id}"


def _read_leaf(value: Any, resolver: LocaleResolver) -> Any:
    # Already resolved strings (e.g. from a pulled file) pass through
    if isinstance(value, Mapping):
        return resolver.resolve(value)
    if isinstance(value, str):
        return value
    return None


def _flatten_fields(
    flat: Dict[str, Any],
    prefix: str,
    config: Any,
    field_paths: Iterable[str],
    resolver: LocaleResolver,
) -> None:
    for field_path in field_paths:
        value = _read_leaf(get_path(config, field_path), resolver)
        if value is not None:
            flat[f"{prefix}.{field_path}"] = value


def flatten_categories(
    prefix: str, categories: Optional[List[Dict[str, Any]]], resolver: LocaleResolver
) -> Dict[str, Any]:
    """Flatten the `name`/`description` of categories of type "category".

    Args:
        prefix: Key prefix, e.g. "notice.<id>.config.preferences".
        categories: Category list of the notice or regulation config.
        resolver: LocaleResolver picking one locale per field.
    """
    flat: Dict[str, Any] = {}
    for category in categories or []:
        if category.get("type") != fields.CATEGORY_TYPE or not category.get("id"):
            continue
        _flatten_fields(
            flat,
            f"{prefix}.categories.{category['id']}",
            category,
            fields.CATEGORY_FIELDS,
            resolver,
        )
    return flat


def flatten_regulations(
    prefix: str,
    regulations: Optional[List[Dict[str, Any]]],
    resolver: LocaleResolver,
    regulation_ids: Optional[Iterable[str]] = None,
    position: Optional[str] = None,
) -> Dict[str, Any]:
    """Flatten the default regulation configs of a notice.

    Args:
        prefix: Root key of the notice.
        regulations: `regulation_configurations` of the notice config.
        resolver: LocaleResolver picking one locale per field.
        regulation_ids: Only flatten these regulations when given.
        position: Notice position selecting the notice text key.
    """
    wanted = set(regulation_ids) if regulation_ids else None
    flat: Dict[str, Any] = {}
    for regulation in regulations or []:
        regulation_id = regulation.get("regulation_id")
        if not regulation.get("is_default_regulation_config"):
            continue
        if wanted is not None and regulation_id not in wanted:
            continue

        regulation_prefix = f"{prefix}.{REGULATIONS_KEY}.{regulation_id}.config"
        config = regulation.get("config") or {}
        _flatten_fields(
            flat,
            regulation_prefix,
            config,
            fields.regulation_fields(position),
            resolver,
        )
        flat.update(
            flatten_categories(
                f"{regulation_prefix}.preferences",
                get_path(config, fields.CATEGORIES_PATH),
                resolver,
            )
        )
    return flat


def flatten_notice_config(
    notice_config: Dict[str, Any],
    resolver: Optional[LocaleResolver] = None,
    regulation_ids: Optional[Iterable[str]] = None,
    position: Optional[str] = None,
) -> Dict[str, Any]:
    """Flatten the translatable fields of a notice configuration.

    Fields missing from the source are omitted.

    Args:
        notice_config: Notice config as returned by the API.
        resolver: LocaleResolver picking one locale per field. Defaults to
            the default locale.
        regulation_ids: Restricts the regulation configs that are flattened.
        position: Notice position; both text keys are read when None.

    Returns:
        Flat translation map.
    """
    resolver = resolver or LocaleResolver()
    prefix = root_key(notice_config["notice_id"])
    config = notice_config.get("config") or {}

    flat: Dict[str, Any] = {}
    _flatten_fields(
        flat, f"{prefix}.config", config, fields.root_fields(position), resolver
    )
    for field_path in fields.NOTICE_PLAIN_FIELDS:
        value = get_path(config, field_path)
        if value is not None:
            flat[f"{prefix}.config.{field_path}"] = value

    flat.update(
        flatten_categories(
            f"{prefix}.config.preferences",
            get_path(config, fields.CATEGORIES_PATH),
            resolver,
        )
    )
    flat.update(
        flatten_regulations(
            prefix,
            notice_config.get(REGULATIONS_KEY),
            resolver,
            regulation_ids=regulation_ids,
            position=position,
        )
    )
    logger.info(
        "notice_config_flattened",
        notice_id=notice_config["notice_id"],
        locale=resolver.target_locale,
        entry_count=len(flat),
    )
    return flat


def restrict_to_regulations(
    flat: Dict[str, Any], regulation_ids: Optional[Iterable[str]]
) -> Dict[str, Any]:
    """Drop the regulation entries whose regulation ID is not listed.

    Root notice entries are always kept. An empty selection keeps everything.
    """
    if not regulation_ids:
        return dict(flat)
    wanted = set(regulation_ids)
    restricted = {}
    for key, value in flat.items():
        match = _REGULATION_SEGMENT.search(key)
        if match and match.group(1) not in wanted:
            continue
        restricted[key] = value
    return restricted


def _categories_to_list(categories: Any) -> List[Dict[str, Any]]:
    if isinstance(categories, list):
        return categories
    return [
        {"id": category_id, "type": fields.CATEGORY_TYPE, **values}
        for category_id, values in categories.items()
    ]


def _regulations_to_list(regulations: Any) -> List[Dict[str, Any]]:
    if isinstance(regulations, list):
        return regulations
    regulation_list = []
    for regulation_id, regulation in regulations.items():
        categories_path = f"config.{fields.CATEGORIES_PATH}"
        categories = get_path(regulation, categories_path)
        if categories is not None:
            set_path(regulation, categories_path, _categories_to_list(categories))
        # Only default configs are flattened
        regulation_list.append(
            {
                "regulation_id": regulation_id,
                "is_default_regulation_config": True,
                **regulation,
            }
        )
    return regulation_list


def unflatten(flat: Mapping[str, Any]) -> Dict[str, Any]:
    """Rebuild a partial notice config from a flat translation map.

    The notice ID is taken from the segment following the `notice.` prefix;
    categories and regulation configs keyed by ID become lists again.

    Raises:
        TranslationFileError: If the map does not target exactly one notice.
    """
    tree: Dict[str, Any] = {}
    for key, value in flat.items():
        set_path(tree, key, value)

    notices = tree.get(NOTICE_PREFIX)
    if not isinstance(notices, dict) or len(notices) != 1:
        logger.error(
            "invalid_translation_keys",
            notice_ids=list(notices) if isinstance(notices, dict) else None,
        )
        raise TranslationFileError(
            "Translation keys must all start with `notice.<notice_id>.` "
            "for a single notice"
        )

    notice_id, body = next(iter(notices.items()))
    notice = {"notice_id": notice_id, **body}

    categories_path = f"config.{fields.CATEGORIES_PATH}"
    categories = get_path(notice, categories_path)
    if categories is not None:
        set_path(notice, categories_path, _categories_to_list(categories))

    regulations = notice.get(REGULATIONS_KEY)
    if regulations is not None:
        notice[REGULATIONS_KEY] = _regulations_to_list(regulations)

    return notice
