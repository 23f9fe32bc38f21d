"""Macro substitution from a master notice to its child notices.

The master notice's translations are flattened for one language, every child
notice gets its own copy with its macros substituted and the notice ID
segment of each key rewritten, and the result is written back to the child's
draft configuration.

Macros are applied in declaration order. A macro whose replacement contains
another macro's key may therefore be substituted again by a later macro.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from core.errors import (
    MissingLocaleInMaster,
    MissingMacroTranslation,
    NotFound,
    WriteBackError,
)
from core.logging import get_module_logger
from infrastructure.i18n import LanguageSelection, LocaleResolver, write_json_file
from modules.notices.assembler import apply_patch, assemble, write_back
from modules.notices.flatten import (
    NOTICE_PREFIX,
    flatten_notice_config,
    restrict_to_regulations,
)
from modules.notices.models import ChildNoticeSpec, Macro
from utils.paths import get_path

logger = get_module_logger()

_NOTICE_ID_SEGMENT = re.compile(rf"{NOTICE_PREFIX}\.[^.]+")


@dataclass
class MacroResult:
    """Substituted translations of one child notice.

    Attributes:
        notice_id: Child notice ID.
        translations: Flat translation map keyed for the child notice.
        unused_macros: Macro keys that matched no value.
    """

    notice_id: str
    translations: Dict[str, Any]
    unused_macros: List[str] = field(default_factory=list)


@dataclass
class MacrosRunReport:
    """Outcome of a macros replacement for one language."""

    language: str
    updated: List[str] = field(default_factory=list)
    previewed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    unused_macros: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return not self.failed


def resolve_macro_value(macro: Macro, language: str) -> str:
    """Return the replacement of a macro for a language.

    Raises:
        MissingMacroTranslation: If a per-locale macro lacks the language.
    """
    if isinstance(macro.value, dict):
        if language not in macro.value:
            logger.error(
                "missing_macro_translation", macro_key=macro.key, language=language
            )
            raise MissingMacroTranslation(macro.key, language)
        return macro.value[language]
    return str(macro.value)


def substitute(
    value: Any,
    macros: Iterable[Macro],
    language: str,
    used: Optional[Set[str]] = None,
) -> Any:
    """Replace every occurrence of every macro key in a value.

    Non-string values are returned unchanged; macro replacements are still
    resolved so a missing translation is reported whatever the value.

    Args:
        value: Value to substitute.
        macros: Macros in application order.
        language: Language of the replacements.
        used: Collects the keys of the macros that matched.
    """
    for macro in macros:
        replacement = resolve_macro_value(macro, language)
        if isinstance(value, str) and macro.key in value:
            if used is not None:
                used.add(macro.key)
            value = value.replace(macro.key, replacement)
    return value


def rewrite_notice_id(key: str, notice_id: str) -> str:
    """Point a flat translation key at another notice."""
    return _NOTICE_ID_SEGMENT.sub(f"{NOTICE_PREFIX}.{notice_id}", key, count=1)


def validate_macro_locales(
    macros: Iterable[Macro],
    master_locales: Iterable[str],
    notice_id: Optional[str] = None,
) -> None:
    """Check that every per-locale macro only uses locales of the master.

    Raises:
        MissingLocaleInMaster: On the first locale the master does not have.
    """
    available = set(master_locales)
    for macro in macros:
        for locale in macro.locales:
            if locale not in available:
                logger.error(
                    "missing_locale_in_master",
                    macro_key=macro.key,
                    locale=locale,
                    notice_id=notice_id,
                )
                raise MissingLocaleInMaster(locale, macro.key, notice_id)


def apply_macros(
    translations: Mapping[str, Any], child: ChildNoticeSpec, language: str
) -> MacroResult:
    """Substitute a child's macros into the master translations.

    Args:
        translations: Flat, locale-resolved translations of the master notice.
        child: Child notice definition.
        language: Language of the translations.

    Returns:
        MacroResult with the child's flat translations and unused macros.

    Raises:
        MissingMacroTranslation: If a per-locale macro lacks the language.
    """
    used: Set[str] = set()
    child_translations: Dict[str, Any] = {}

    for key, value in translations.items():
        substituted = substitute(value, child.macros, language, used)
        child_translations[rewrite_notice_id(key, child.notice_id)] = substituted

    unused = []
    for macro in child.macros:
        if macro.key not in used and macro.key not in unused:
            unused.append(macro.key)

    if unused:
        logger.warning(
            "unused_macros",
            notice_id=child.notice_id,
            language=language,
            macro_keys=unused,
        )

    return MacroResult(
        notice_id=child.notice_id,
        translations=child_translations,
        unused_macros=unused,
    )


def replace_notices_with_macros(
    client,
    master_notice_id: str,
    language: str,
    children_notices: List[ChildNoticeSpec],
    position: Optional[str] = None,
    dry_run: bool = False,
    fail_fast: bool = False,
    regulation_ids: Optional[Iterable[str]] = None,
    translations_path=None,
) -> MacrosRunReport:
    """Propagate the master notice's text to its children for one language.

    Macro authoring errors abort the run. Write-back errors of one child are
    logged and recorded in the report unless `fail_fast` is set.

    Args:
        client: ConsentApiClient.
        master_notice_id: Notice whose text is the template.
        language: Language to process.
        children_notices: Child notice definitions.
        position: Notice position of the master's default regulation config.
        dry_run: Log the computed configs instead of PATCHing them.
        fail_fast: Re-raise the first write-back error.
        regulation_ids: Regulations read from the master notice.
        translations_path: Where to save the master translations, if set.

    Returns:
        MacrosRunReport for the language.
    """
    log = logger.bind(language=language, master_notice_id=master_notice_id)
    report = MacrosRunReport(language=language)

    master_config = client.get_draft_notice_config(master_notice_id)
    master_locales = get_path(master_config, "config.languages.enabled") or []
    resolver = LocaleResolver(language, specific_language_mode=True)
    translations = flatten_notice_config(
        master_config, resolver, regulation_ids=regulation_ids, position=position
    )
    if translations_path:
        write_json_file(translations_path, translations)

    for child in children_notices:
        validate_macro_locales(child.macros, master_locales, child.notice_id)
        result = apply_macros(
            restrict_to_regulations(translations, child.regulation_ids),
            child,
            language,
        )
        if result.unused_macros:
            report.unused_macros[child.notice_id] = result.unused_macros

        if dry_run:
            log.info(
                "dry_run_child_translations",
                notice_id=child.notice_id,
                translations=result.translations,
            )

        try:
            remote_config = client.get_draft_notice_config(child.notice_id)
            updated = apply_patch(
                remote_config, assemble(result.translations), language, position
            )
            written = write_back(client, updated, dry_run=dry_run)
        except (WriteBackError, NotFound) as e:
            log.error("child_notice_update_failed", notice_id=child.notice_id, error=str(e))
            if fail_fast:
                raise
            report.failed[child.notice_id] = str(e)
            continue

        if written:
            report.updated.append(child.notice_id)
        else:
            report.previewed.append(child.notice_id)

    log.info(
        "macros_replacement_completed",
        updated=report.updated,
        previewed=report.previewed,
        failed=list(report.failed),
    )
    return report


def get_master_notice_details(
    client, master_notice_id: str, regulation_id: str = "gdpr"
) -> Dict[str, Any]:
    """Enabled languages and notice position of the master notice.

    Raises:
        NotFound: If no languages are enabled or the default regulation
            config is missing.
    """
    notice_config = client.get_draft_notice_config(master_notice_id)
    enabled_languages = get_path(notice_config, "config.languages.enabled")
    if not isinstance(enabled_languages, list) or not enabled_languages:
        raise NotFound("No enabled languages found in notice configuration.")

    default_regulation = next(
        (
            regulation
            for regulation in notice_config.get("regulation_configurations") or []
            if regulation.get("regulation_id") == regulation_id
            and regulation.get("is_default_regulation_config")
        ),
        None,
    )
    if default_regulation is None:
        raise NotFound(
            f"Default {regulation_id.upper()} regulation configuration not found."
        )

    return {
        "languages": enabled_languages,
        "position": get_path(default_regulation, "config.notice.position"),
    }


def run_macros_replacement(
    client,
    master_notice_id: str,
    language_selection: str,
    children_notices: List[ChildNoticeSpec],
    dry_run: bool = False,
    fail_fast: bool = False,
    regulation_id: str = "gdpr",
    regulation_ids: Optional[Iterable[str]] = None,
    translations_path=None,
) -> List[MacrosRunReport]:
    """Run the macros replacement for "fr", "fr,en" or "all" languages.

    Languages are processed one after the other.
    """
    details = get_master_notice_details(client, master_notice_id, regulation_id)
    languages = LanguageSelection(language_selection).resolve(details["languages"])

    reports = []
    for language in languages:
        logger.info("running_macros_replacement", language=language, dry_run=dry_run)
        reports.append(
            replace_notices_with_macros(
                client,
                master_notice_id,
                language,
                children_notices,
                position=details["position"],
                dry_run=dry_run,
                fail_fast=fail_fast,
                regulation_ids=regulation_ids,
                translations_path=translations_path,
            )
        )

    logger.info("macros_replacement_complete", languages=languages)
    return reports
