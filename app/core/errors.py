"""Errors raised by the consent notice tools.

All errors inherit from `ConsentToolsError` so the CLI can report them
uniformly:

    try:
        run_command(args)
    except ConsentToolsError as e:
        logger.error("command_failed", error=str(e))
"""

from typing import Optional

AUTHENTICATION_HELP_URL = (
    "https://developers.didomi.io/api/introduction/authentication"
)


class ConsentToolsError(Exception):
    """Base exception for all consent notice tools errors."""


class ConfigurationError(ConsentToolsError):
    """Raised when a required setting is missing or invalid."""


class TranslationFileError(ConsentToolsError):
    """Raised when a translation, macros or purposes file cannot be read."""


# --- Consent API ---


class ConsentApiError(ConsentToolsError):
    """Raised when the consent API answers with an unexpected status.

    Attributes:
        status_code: HTTP status code of the response, if any.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationFailure(ConsentApiError):
    """Raised when the consent API rejects the credentials (HTTP 401)."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or (
                "Please enter a valid authentication token. "
                f"More information here: {AUTHENTICATION_HELP_URL}"
            ),
            status_code=401,
        )


class NotFound(ConsentApiError):
    """Raised when a notice, notice config, regulation config or purpose is absent."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


# --- Macros ---


class MacroError(ConsentToolsError):
    """Base exception for macro authoring errors. Fatal for the whole run."""


class MissingLocaleInMaster(MacroError):
    """Raised when a macro defines a locale the master notice does not have.

    Example:
        >>> validate_macro_locales([Macro(key="{{X}}", value={"de": "x"})], ["en"])
        Traceback (most recent call last):
        ...
        MissingLocaleInMaster: The master text does not contain the locale "de" ...
    """

    def __init__(self, locale: str, macro_key: str, notice_id: Optional[str] = None):
        message = (
            f'The master text does not contain the locale "{locale}" '
            f'configured in macro "{macro_key}"'
        )
        if notice_id:
            message += f' of child notice "{notice_id}"'
        super().__init__(message)
        self.locale = locale
        self.macro_key = macro_key
        self.notice_id = notice_id


class MissingMacroTranslation(MacroError):
    """Raised when a per-locale macro value lacks the requested language."""

    def __init__(self, macro_key: str, language: str):
        super().__init__(
            f'Missing macro translation for key "{macro_key}" in language '
            f'"{language}". Please define it in the macros file.'
        )
        self.macro_key = macro_key
        self.language = language


class MacroKeyNotFound(MacroError):
    """Raised when a macro key does not appear in the master text of a locale."""

    def __init__(self, macro_key: str, locale: str):
        super().__init__(
            f"Defined macro key {macro_key} was not found in the master text "
            f"for locale: {locale}"
        )
        self.macro_key = macro_key
        self.locale = locale


# --- Write-back ---


class WriteBackError(ConsentToolsError):
    """Base exception for write-back precondition violations.

    Fatal for the update of one notice only; batch callers may continue
    with the next child notice.
    """


class NoticeIdMismatch(WriteBackError):
    """Raised when the assembled patch targets another notice than the remote config."""

    def __init__(self, remote_notice_id: str, patch_notice_id: str):
        super().__init__(
            f'The notice ID "{remote_notice_id}" does not match the configured '
            f'notice ID: "{patch_notice_id}".'
        )
        self.remote_notice_id = remote_notice_id
        self.patch_notice_id = patch_notice_id


class LanguageNotEnabled(WriteBackError):
    """Raised when the target language is not enabled on the remote notice."""

    def __init__(self, language: str, notice_id: Optional[str] = None):
        super().__init__(
            f'The language "{language}" is not enabled for the notice'
            + (f' "{notice_id}".' if notice_id else ".")
        )
        self.language = language
        self.notice_id = notice_id


class RegulationConfigMismatch(WriteBackError):
    """Raised when a pulled regulation config is older than the remote one."""

    def __init__(self, local_id: Optional[str], remote_id: Optional[str]):
        super().__init__(
            "The pulled regulation configuration ID differs from the last existing "
            f'one ("{local_id}" != "{remote_id}"). You may override the latest '
            "saved and published content. Please pull the latest content first "
            "before attempting to push."
        )
        self.local_id = local_id
        self.remote_id = remote_id
