import logging

import pytest

from payitem_sync.core.config import Settings, _validate_secrets

GOOD_KEY = "k" * 40


def make_settings(**overrides):
    values = {"partner_api_key": "partner", "internal_api_key": GOOD_KEY}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_defaults(self):
        s = make_settings()
        assert s.pay_item_default_deduction_percentage == 30.0
        assert s.pay_item_wipe_scope == "user"
        assert s.partner_max_pages == 1000

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PARTNER_MAX_PAGES", "25")
        monkeypatch.setenv("PAY_ITEM_WIPE_SCOPE", "business")
        s = make_settings()
        assert s.partner_max_pages == 25
        assert s.pay_item_wipe_scope == "business"

    def test_rejects_unknown_wipe_scope(self):
        with pytest.raises(ValueError):
            make_settings(pay_item_wipe_scope="everything")


class TestValidateSecrets:
    def test_valid_configuration_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING):
            _validate_secrets(make_settings())
        assert caplog.records == []

    def test_missing_partner_key_warns_in_development(self, caplog):
        with caplog.at_level(logging.WARNING):
            _validate_secrets(make_settings(partner_api_key=""))
        assert "PARTNER_API_KEY" in caplog.text

    def test_short_internal_key_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            _validate_secrets(make_settings(internal_api_key="short"))
        assert "too short" in caplog.text

    def test_production_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _validate_secrets(make_settings(environment="production", partner_api_key=""))
        assert exc_info.value.code == 1
        assert "PARTNER_API_KEY" in capsys.readouterr().err
