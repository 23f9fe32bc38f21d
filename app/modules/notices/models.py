"""Macro definitions for child notices.

Loaded from the macros file:

    {
        "childrenNotices": [
            {
                "noticeId": "child-1",
                "regulationIds": ["gdpr"],
                "macros": [
                    {"key": "{{BRAND}}", "value": {"en": "Acme", "fr": "Acme FR"}},
                    {"key": "{{YEAR}}", "value": 2024}
                ]
            }
        ]
    }
"""

from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import TranslationFileError
from core.logging import get_module_logger
from infrastructure.i18n import read_structured_file

logger = get_module_logger()


class Macro(BaseModel):
    """A token and its replacement, either one scalar or a LocaleMap.

    Numeric scalars are substituted as their string form.
    """

    key: str = Field(..., min_length=1, description="Literal token to replace")
    value: Union[str, int, float, Dict[str, str]] = Field(
        ..., description="Replacement, or replacements keyed by locale"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def is_localized(self) -> bool:
        return isinstance(self.value, dict)

    @property
    def locales(self) -> List[str]:
        """Locales defined by a per-locale macro, empty for scalar macros."""
        return list(self.value) if isinstance(self.value, dict) else []


class ChildNoticeSpec(BaseModel):
    """A child notice derived from the master notice through macros."""

    notice_id: str = Field(..., alias="noticeId", min_length=1)
    regulation_ids: List[str] = Field(default_factory=list, alias="regulationIds")
    macros: List[Macro] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class MacroFile(BaseModel):
    """Content of the macros file."""

    children_notices: List[ChildNoticeSpec] = Field(
        default_factory=list, alias="childrenNotices"
    )

    model_config = ConfigDict(populate_by_name=True)


def load_children_notices(path) -> List[ChildNoticeSpec]:
    """Load the child notice definitions from a JSON or YAML macros file.

    Raises:
        TranslationFileError: If the file is unreadable or does not match the schema.
    """
    data = read_structured_file(path)
    try:
        macro_file = MacroFile.model_validate(data)
    except ValidationError as e:
        logger.error("invalid_macros_file", file=str(path), error=str(e))
        raise TranslationFileError(f"Invalid macros file {path}: {e}") from e

    logger.info(
        "loaded_children_notices",
        file=str(path),
        children_count=len(macro_file.children_notices),
    )
    return macro_file.children_notices
