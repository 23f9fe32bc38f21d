"""Custom text template: derive child notice texts from a master regulation config.

The notice text (popup or banner) of a master regulation config is the
template. Each child notice lists the regulations to update and the macros to
substitute; the substituted text replaces the child's text for those
regulations after a confirmation prompt.
"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.errors import ConsentToolsError, MacroKeyNotFound, NotFound
from core.logging import get_module_logger
from infrastructure.i18n import LocaleMap, non_empty_locales
from modules.notices.assembler import write_back
from modules.notices.fields import DEFAULT_POSITION, notice_content_key
from modules.notices.macros import substitute, validate_macro_locales
from modules.notices.models import ChildNoticeSpec, Macro
from utils.paths import get_path, set_path

logger = get_module_logger()

Prompt = Callable[[str], str]


@dataclass
class MasterTemplate:
    """Master regulation config selected as the text template."""

    regulation_config: Dict[str, Any]
    notice_config: Dict[str, Any]
    text: LocaleMap
    locales: List[str]


@dataclass
class PendingUpdate:
    """A child notice config with changes waiting for confirmation."""

    notice_id: str
    notice_config: Dict[str, Any]


def is_enabled_default_regulation_config(regulation_config: Dict[str, Any]) -> bool:
    """Default, not disabled and deployed to at least one geo location."""
    return bool(
        regulation_config.get("is_default_regulation_config")
        and not regulation_config.get("disabled_at")
        and regulation_config.get("geo_locations")
    )


def notice_position(config: Optional[Dict[str, Any]]) -> str:
    return get_path(config, "notice.position") or DEFAULT_POSITION


def content_key(
    notice_config: Dict[str, Any], regulation_config: Dict[str, Any]
) -> str:
    return notice_content_key(
        notice_position(regulation_config.get("config")),
        notice_config.get("platform"),
    )


def extract_text(
    notice_config: Dict[str, Any], regulation_config: Dict[str, Any]
) -> Optional[LocaleMap]:
    """Notice text of a regulation config for its platform and position."""
    key = content_key(notice_config, regulation_config)
    return get_path(regulation_config, f"config.notice.content.{key}")


def with_text(
    notice_config: Dict[str, Any],
    regulation_config: Dict[str, Any],
    text: LocaleMap,
) -> Dict[str, Any]:
    """Return a copy of a regulation config with its notice text replaced."""
    key = content_key(notice_config, regulation_config)
    updated = copy.deepcopy(regulation_config)
    return set_path(updated, f"config.notice.content.{key}", text)


def regulation_selection_text(
    notice_config: Dict[str, Any], regulation_config: Dict[str, Any], index: int
) -> str:
    """One line of the master regulation selection list."""
    locales = non_empty_locales(extract_text(notice_config, regulation_config))
    return (
        f"{index + 1}. {regulation_config.get('regulation_id')} "
        f"[{regulation_config.get('id')}]: {len(locales)} non empty locale/s: "
        f"[{', '.join(locales)}]"
    )


def select_master_regulation_config(
    client, master_notice_id: str, prompt: Prompt = input
) -> MasterTemplate:
    """Select the master regulation config whose text is the template.

    Prompts for a choice when the master notice has several enabled default
    regulation configs.

    Raises:
        NotFound: If no enabled default regulation config exists.
        ConsentToolsError: If the selected regulation config has no text.
    """
    notice = client.get_notice(master_notice_id)
    logger.info("master_notice_found", notice_id=notice["id"], name=notice.get("name"))

    notice_config = client.get_draft_notice_config(master_notice_id)
    candidates = [
        regulation
        for regulation in notice_config.get("regulation_configurations") or []
        if is_enabled_default_regulation_config(regulation)
    ]

    selected = None
    if len(candidates) == 1:
        selected = candidates[0]
    elif len(candidates) > 1:
        choices = "\n".join(
            regulation_selection_text(notice_config, regulation, index)
            for index, regulation in enumerate(candidates)
        )
        print(
            "Found multiple regulation configurations in the master notice config, "
            f"please select one:\n{choices}"
        )
        while selected is None:
            answer = prompt(
                "Enter the number of the master regulation configuration "
                "you want to select: "
            ).strip()
            if answer.isdigit() and 1 <= int(answer) <= len(candidates):
                selected = candidates[int(answer) - 1]

    if selected is None:
        logger.error("master_regulation_config_not_found", notice_id=master_notice_id)
        raise NotFound("No master regulation configurations found")

    text = extract_text(notice_config, selected)
    if not text:
        raise ConsentToolsError("The master regulation configuration has no text")

    locales = non_empty_locales(text)
    logger.info(
        "master_regulation_config_selected",
        regulation_id=selected.get("regulation_id"),
        locales=locales,
    )
    return MasterTemplate(
        regulation_config=selected,
        notice_config=notice_config,
        text=text,
        locales=locales,
    )


def build_child_text(
    master: MasterTemplate,
    macros: List[Macro],
    notice_id: Optional[str] = None,
) -> LocaleMap:
    """Substitute macros into the master text for every macro locale.

    The target locales are the locales named by per-locale macros, or every
    master locale when all macros are scalar. A per-locale macro is only
    applied to the locales it defines.

    Raises:
        MissingLocaleInMaster: If a macro names a locale the master lacks.
        MacroKeyNotFound: If a macro key is absent from the master text of a locale.
    """
    validate_macro_locales(macros, master.locales, notice_id)

    locales: List[str] = []
    for macro in macros:
        for locale in macro.locales:
            if locale not in locales:
                locales.append(locale)
    if not locales:
        locales = list(master.locales)

    for macro in macros:
        for locale in macro.locales or locales:
            if macro.key not in master.text[locale]:
                raise MacroKeyNotFound(macro.key, locale)

    return {
        locale: substitute(
            master.text[locale], _macros_for_locale(macros, locale), locale
        )
        for locale in locales
    }


def _macros_for_locale(macros: List[Macro], locale: str) -> List[Macro]:
    return [
        macro for macro in macros if not macro.is_localized or locale in macro.locales
    ]


def process_child_regulation(
    notice_config: Dict[str, Any],
    regulation_id: str,
    macros: List[Macro],
    master: MasterTemplate,
) -> Tuple[Dict[str, Any], bool]:
    """Compute a child notice config with the templated text for one regulation.

    Returns:
        The updated notice config copy and whether the text changed.

    Raises:
        NotFound: If the child has no default config for the regulation.
    """
    regulations = notice_config.get("regulation_configurations") or []
    index = next(
        (
            i
            for i, regulation in enumerate(regulations)
            if regulation.get("is_default_regulation_config")
            and regulation.get("regulation_id") == regulation_id
        ),
        None,
    )
    if index is None:
        logger.error(
            "child_regulation_config_not_found",
            notice_id=notice_config.get("notice_id"),
            regulation_id=regulation_id,
        )
        raise NotFound(
            f"Child regulation config not found for notice id: "
            f"{notice_config.get('notice_id')} and regulation id: {regulation_id}"
        )

    regulation_config = regulations[index]
    existing_text = extract_text(notice_config, regulation_config) or {}
    text = build_child_text(master, macros, notice_config.get("notice_id"))

    has_changes = False
    for locale, value in text.items():
        if existing_text.get(locale) == value:
            logger.info("no_changes_for_locale", regulation_id=regulation_id, locale=locale)
        else:
            has_changes = True
            logger.info("changes_for_locale", regulation_id=regulation_id, locale=locale)

    updated = copy.deepcopy(notice_config)
    updated["regulation_configurations"][index] = with_text(
        notice_config, regulation_config, text
    )
    return updated, has_changes


def prepare_child_update(
    client, child: ChildNoticeSpec, master: MasterTemplate
) -> Optional[PendingUpdate]:
    """Fetch a child notice and compute its update, None when nothing changes."""
    notice = client.get_notice(child.notice_id)
    notice_config = client.get_draft_notice_config(child.notice_id)
    logger.info(
        "processing_child_notice",
        notice_id=child.notice_id,
        name=notice.get("name"),
        config_id=notice_config.get("id"),
        enabled_regulations=[
            regulation.get("regulation_id")
            for regulation in notice_config.get("regulation_configurations") or []
            if is_enabled_default_regulation_config(regulation)
        ],
    )
    if not child.regulation_ids:
        logger.warning("child_notice_without_regulations", notice_id=child.notice_id)

    has_changes = False
    for regulation_id in child.regulation_ids:
        notice_config, changed = process_child_regulation(
            notice_config, regulation_id, child.macros, master
        )
        has_changes = has_changes or changed

    if not has_changes:
        logger.info("no_changes_to_apply", notice_id=child.notice_id)
        return None
    return PendingUpdate(notice_id=child.notice_id, notice_config=notice_config)


def confirm(prompt: Prompt, question: str) -> bool:
    """Ask a y/n question until one of both is answered."""
    answer = None
    while answer not in ("y", "n"):
        answer = prompt(question).strip().lower()
    return answer == "y"


def apply_custom_text_template(
    client,
    master_notice_id: str,
    children_notices: List[ChildNoticeSpec],
    dry_run: bool = False,
    assume_yes: bool = False,
    prompt: Prompt = input,
) -> List[str]:
    """Apply the master regulation text to every child notice.

    Returns:
        The IDs of the child notices written (or previewed in dry-run mode).
    """
    if not children_notices:
        logger.info("no_children_notices_to_process")
        return []

    master = select_master_regulation_config(client, master_notice_id, prompt)

    updates = []
    for child in children_notices:
        update = prepare_child_update(client, child, master)
        if update is not None:
            updates.append(update)

    if not updates:
        logger.info("template_done_without_updates")
        return []

    question = f"{len(updates)} notice configs will be updated, continue? (y/n): "
    if not assume_yes and not confirm(prompt, question):
        logger.info("template_update_aborted")
        return []

    for update in updates:
        write_back(client, update.notice_config, dry_run=dry_run)

    updated_ids = [update.notice_id for update in updates]
    logger.info("template_update_completed", notice_ids=updated_ids, dry_run=dry_run)
    return updated_ids
