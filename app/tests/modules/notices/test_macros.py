from unittest.mock import patch

import pytest

from core.errors import (
    LanguageNotEnabled,
    MissingLocaleInMaster,
    MissingMacroTranslation,
    NotFound,
)
from infrastructure.i18n import LocaleResolver, read_json_file
from modules.notices import macros
from modules.notices.flatten import flatten_notice_config
from modules.notices.models import Macro
from tests.factories.notices import (
    make_child_notice,
    make_notice_config,
    make_regulation_config,
)

CHILD_ROOT = "notice.child-a.config"
CHILD_GDPR = "notice.child-a.regulation_configurations.gdpr.config"


def french_translations(notice_config):
    return flatten_notice_config(
        notice_config, LocaleResolver("fr", specific_language_mode=True)
    )


class TestSubstitute:
    def test_replaces_every_occurrence(self):
        value = macros.substitute(
            "{{BRAND}} and {{BRAND}}", [Macro(key="{{BRAND}}", value="Acme")], "en"
        )
        assert value == "Acme and Acme"

    def test_applies_macros_in_declaration_order(self):
        ordered = [
            Macro(key="{{A}}", value="{{B}}!"),
            Macro(key="{{B}}", value="b"),
        ]
        assert macros.substitute("{{A}}", ordered, "en") == "b!"
        assert macros.substitute("{{A}}", list(reversed(ordered)), "en") == "{{B}}!"

    def test_numeric_value_is_substituted_as_text(self):
        value = macros.substitute(
            "Since {{YEAR}}", [Macro(key="{{YEAR}}", value=2024)], "fr"
        )
        assert value == "Since 2024"

    def test_per_locale_value(self):
        macro = Macro(key="{{BRAND}}", value={"en": "Acme", "fr": "Acmé"})
        assert macros.substitute("{{BRAND}}", [macro], "fr") == "Acmé"

    def test_collects_used_keys(self):
        used = set()
        macros.substitute(
            "Hello {{NAME}}",
            [Macro(key="{{NAME}}", value="x"), Macro(key="{{OTHER}}", value="y")],
            "en",
            used,
        )
        assert used == {"{{NAME}}"}

    def test_non_string_values_are_unchanged(self):
        value = ["{{BRAND}}"]
        assert macros.substitute(value, [Macro(key="{{BRAND}}", value="x")], "en") is value

    def test_missing_translation_is_reported_for_any_value(self):
        macro = Macro(key="{{BRAND}}", value={"en": "Acme"})
        with pytest.raises(MissingMacroTranslation) as err:
            macros.substitute("no macro here", [macro], "fr")
        assert err.value.macro_key == "{{BRAND}}"
        assert err.value.language == "fr"


def test_rewrite_notice_id_rewrites_first_segment_only():
    key = "notice.master.config.notice.content.popup"
    assert (
        macros.rewrite_notice_id(key, "child-a")
        == "notice.child-a.config.notice.content.popup"
    )


def test_validate_macro_locales():
    macros.validate_macro_locales(
        [Macro(key="{{A}}", value={"en": "a"}), Macro(key="{{B}}", value="b")],
        ["en", "fr"],
    )
    with pytest.raises(MissingLocaleInMaster) as err:
        macros.validate_macro_locales(
            [Macro(key="{{A}}", value={"de": "a"})], ["en", "fr"], "child-a"
        )
    assert err.value.locale == "de"
    assert err.value.notice_id == "child-a"


class TestApplyMacros:
    def test_substitutes_and_rekeys(self, master_notice_config, child_notice):
        result = macros.apply_macros(
            french_translations(master_notice_config), child_notice, "fr"
        )

        assert result.notice_id == "child-a"
        assert result.unused_macros == []
        assert result.translations[f"{CHILD_ROOT}.notice.content.popup"] == (
            "Bienvenue chez Acmé"
        )
        assert result.translations[f"{CHILD_GDPR}.notice.content.popup"] == (
            "Acmé utilise des cookies"
        )
        assert not any(key.startswith("notice.master.") for key in result.translations)

    @patch("modules.notices.macros.logger")
    def test_reports_unused_macros(self, mock_logger, master_notice_config):
        child = make_child_notice(
            macros=[
                {"key": "{{BRAND}}", "value": "Acme"},
                {"key": "{{UNUSED}}", "value": "x"},
            ]
        )

        result = macros.apply_macros(
            french_translations(master_notice_config), child, "fr"
        )

        assert result.unused_macros == ["{{UNUSED}}"]
        mock_logger.warning.assert_called_once_with(
            "unused_macros",
            notice_id="child-a",
            language="fr",
            macro_keys=["{{UNUSED}}"],
        )


class TestReplaceNoticesWithMacros:
    def test_writes_language_slot_of_child(
        self, mock_client, master_notice_config, child_notice_config, child_notice
    ):
        mock_client.configs = {"master": master_notice_config, "child-a": child_notice_config}

        report = macros.replace_notices_with_macros(
            mock_client, "master", "fr", [child_notice], position="popup"
        )

        assert report.updated == ["child-a"]
        assert report.is_success
        mock_client.update_notice_config.assert_called_once()
        updated = mock_client.update_notice_config.call_args.args[0]
        assert updated["config"]["notice"]["content"]["popup"] == {
            "en": "Old welcome",
            "fr": "Bienvenue chez Acmé",
        }
        regulation = updated["regulation_configurations"][0]
        assert regulation["config"]["notice"]["content"]["popup"] == {
            "en": "Old cookies text",
            "fr": "Acmé utilise des cookies",
        }
        category = updated["config"]["preferences"]["categories"][0]
        assert category["description"]["fr"] == "Mesurer l'audience de Acmé"
        # The fetched config is left untouched
        assert child_notice_config["config"]["notice"]["content"]["popup"]["fr"] == (
            "Ancien accueil"
        )

    def test_dry_run_does_not_write(
        self, mock_client, master_notice_config, child_notice_config, child_notice
    ):
        mock_client.configs = {"master": master_notice_config, "child-a": child_notice_config}

        report = macros.replace_notices_with_macros(
            mock_client, "master", "fr", [child_notice], dry_run=True
        )

        assert report.previewed == ["child-a"]
        assert report.updated == []
        mock_client.update_notice_config.assert_not_called()

    def test_saves_master_translations(
        self,
        tmp_path,
        mock_client,
        master_notice_config,
        child_notice_config,
        child_notice,
    ):
        mock_client.configs = {"master": master_notice_config, "child-a": child_notice_config}
        path = tmp_path / "data" / "translations.json"

        macros.replace_notices_with_macros(
            mock_client,
            "master",
            "fr",
            [child_notice],
            dry_run=True,
            translations_path=path,
        )

        saved = read_json_file(path)
        assert saved["notice.master.config.notice.content.popup"] == (
            "Bienvenue chez {{BRAND}}"
        )

    def test_isolates_child_failures(
        self, mock_client, master_notice_config, child_notice_config, child_notice
    ):
        mock_client.configs = {
            "master": master_notice_config,
            "child-a": child_notice_config,
            "child-b": make_notice_config("child-b", enabled_languages=["en"]),
        }

        report = macros.replace_notices_with_macros(
            mock_client,
            "master",
            "fr",
            [make_child_notice("child-b"), child_notice],
        )

        assert list(report.failed) == ["child-b"]
        assert report.updated == ["child-a"]
        assert report.is_success is False
        mock_client.update_notice_config.assert_called_once()

    def test_fail_fast_raises_first_failure(
        self, mock_client, master_notice_config, child_notice_config, child_notice
    ):
        mock_client.configs = {
            "master": master_notice_config,
            "child-a": child_notice_config,
            "child-b": make_notice_config("child-b", enabled_languages=["en"]),
        }

        with pytest.raises(LanguageNotEnabled):
            macros.replace_notices_with_macros(
                mock_client,
                "master",
                "fr",
                [make_child_notice("child-b"), child_notice],
                fail_fast=True,
            )
        mock_client.update_notice_config.assert_not_called()

    def test_macro_locale_missing_in_master_aborts(
        self, mock_client, master_notice_config, child_notice_config
    ):
        mock_client.configs = {"master": master_notice_config, "child-a": child_notice_config}
        child = make_child_notice(macros=[{"key": "{{BRAND}}", "value": {"de": "Acme"}}])

        with pytest.raises(MissingLocaleInMaster):
            macros.replace_notices_with_macros(mock_client, "master", "fr", [child])
        mock_client.update_notice_config.assert_not_called()

    def test_missing_macro_translation_aborts(
        self, mock_client, master_notice_config, child_notice_config
    ):
        mock_client.configs = {"master": master_notice_config, "child-a": child_notice_config}
        child = make_child_notice(macros=[{"key": "{{BRAND}}", "value": {"en": "Acme"}}])

        with pytest.raises(MissingMacroTranslation):
            macros.replace_notices_with_macros(mock_client, "master", "fr", [child])
        mock_client.update_notice_config.assert_not_called()

    def test_child_regulations_restrict_updates(
        self, mock_client, master_notice_config, child_notice_config
    ):
        mock_client.configs = {"master": master_notice_config, "child-a": child_notice_config}
        child = make_child_notice(regulation_ids=["cpra"])

        macros.replace_notices_with_macros(mock_client, "master", "fr", [child])

        updated = mock_client.update_notice_config.call_args.args[0]
        regulation = updated["regulation_configurations"][0]
        assert regulation["config"]["notice"]["content"]["popup"]["fr"] == "Ancien texte"
        assert updated["config"]["notice"]["content"]["popup"]["fr"] == (
            "Bienvenue chez Acmé"
        )


class TestRunMacrosReplacement:
    def test_all_languages(
        self, mock_client, master_notice_config, child_notice_config, child_notice
    ):
        mock_client.configs = {"master": master_notice_config, "child-a": child_notice_config}

        reports = macros.run_macros_replacement(
            mock_client, "master", "all", [child_notice]
        )

        assert [report.language for report in reports] == ["en", "fr"]
        assert mock_client.update_notice_config.call_count == 2
        english = mock_client.update_notice_config.call_args_list[0].args[0]
        assert english["config"]["notice"]["content"]["popup"]["en"] == "Welcome to Acme"

    def test_master_details(self, mock_client, master_notice_config):
        mock_client.configs = {"master": master_notice_config}
        assert macros.get_master_notice_details(mock_client, "master") == {
            "languages": ["en", "fr"],
            "position": "popup",
        }

    def test_master_without_default_regulation(self, mock_client):
        mock_client.configs = {
            "master": make_notice_config(
                regulations=[make_regulation_config("cpra")]
            )
        }
        with pytest.raises(NotFound):
            macros.get_master_notice_details(mock_client, "master")

    def test_master_without_languages(self, mock_client):
        mock_client.configs = {"master": make_notice_config(enabled_languages=[])}
        with pytest.raises(NotFound):
            macros.get_master_notice_details(mock_client, "master")


@patch("modules.notices.macros.logger")
def test_dry_run_logs_child_text_without_patch(mock_logger, mock_client):
    mock_client.configs = {
        "master": make_notice_config(
            enabled_languages=["en"], popup_text={"en": "Welcome {{BRAND}}"}, regulations=[]
        ),
        "child-1": make_notice_config(
            "child-1", enabled_languages=["en"], popup_text={"en": "Hi"}, regulations=[]
        ),
    }
    child = make_child_notice("child-1", macros=[{"key": "{{BRAND}}", "value": {"en": "Acme"}}])

    report = macros.replace_notices_with_macros(
        mock_client, "master", "en", [child], dry_run=True
    )

    assert report.previewed == ["child-1"]
    mock_client.update_notice_config.assert_not_called()
    log = mock_logger.bind.return_value
    [dry_run_call] = [
        c for c in log.info.call_args_list if c.args[0] == "dry_run_child_translations"
    ]
    translations = dry_run_call.kwargs["translations"]
    assert translations["notice.child-1.config.notice.content.popup"] == "Welcome Acme"
