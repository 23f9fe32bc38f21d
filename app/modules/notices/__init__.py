"""Notice translations, macros and custom text templates."""

from modules.notices.assembler import apply_patch, assemble, write_back
from modules.notices.flatten import flatten_notice_config, unflatten
from modules.notices.macros import (
    MacroResult,
    MacrosRunReport,
    apply_macros,
    replace_notices_with_macros,
    run_macros_replacement,
)
from modules.notices.models import ChildNoticeSpec, Macro, load_children_notices
from modules.notices.templates import apply_custom_text_template
from modules.notices.translations import (
    pull_notice_translations,
    push_notice_translations,
)

__all__ = [
    "ChildNoticeSpec",
    "Macro",
    "MacroResult",
    "MacrosRunReport",
    "apply_custom_text_template",
    "apply_macros",
    "apply_patch",
    "assemble",
    "flatten_notice_config",
    "load_children_notices",
    "pull_notice_translations",
    "push_notice_translations",
    "replace_notices_with_macros",
    "run_macros_replacement",
    "unflatten",
    "write_back",
]
