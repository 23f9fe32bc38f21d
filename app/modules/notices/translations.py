"""Pull and push of notice translations through flat JSON files."""

from typing import Any, Dict, Iterable, Optional

from core.errors import TranslationFileError
from core.logging import get_module_logger
from infrastructure.i18n import LocaleResolver, read_json_file, write_json_file
from modules.notices.assembler import apply_patch, assemble, write_back
from modules.notices.flatten import flatten_notice_config
from utils.paths import get_path

logger = get_module_logger()


def pull_notice_translations(
    client,
    notice_id: str,
    path,
    language: Optional[str] = None,
    regulation_ids: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Write the translatable texts of a notice's draft config to a flat JSON file.

    Without a language the default locale is extracted, which is the input
    expected by translators.
    """
    notice_config = client.get_draft_notice_config(notice_id)
    logger.info(
        "pulling_notice_translations",
        notice_id=notice_config.get("notice_id"),
        config_id=notice_config.get("id"),
        default_language=get_path(notice_config, "config.languages.default"),
        enabled_languages=get_path(notice_config, "config.languages.enabled"),
    )

    resolver = LocaleResolver(language, specific_language_mode=language is not None)
    translations = flatten_notice_config(
        notice_config, resolver, regulation_ids=regulation_ids
    )
    write_json_file(path, translations)
    return translations


def push_notice_translations(
    client,
    notice_id: str,
    path,
    language: str,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Write the translations of a flat JSON file into a notice's `language` slot.

    Returns:
        The updated notice config (PATCHed unless `dry_run`).
    """
    translations = read_json_file(path)
    if not isinstance(translations, dict):
        raise TranslationFileError(f"Expected a flat JSON object in {path}")

    patch = assemble(translations)
    remote_config = client.get_draft_notice_config(notice_id)
    updated = apply_patch(remote_config, patch, language)
    write_back(client, updated, dry_run=dry_run)
    logger.info(
        "pushed_notice_translations",
        notice_id=notice_id,
        language=language,
        dry_run=dry_run,
    )
    return updated
