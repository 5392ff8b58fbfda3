"""Unit tests for settings and log formatting."""

import json
import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from formflow.config import Settings, get_settings
from formflow.logging_config import DevelopmentFormatter, JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="formflow.services.navigation",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Navigation rule %d matched",
        args=(0,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:

    def test_json_formatter_lifts_extras(self):
        data = json.loads(JSONFormatter().format(_record(form_id="contact", step_id="about")))
        assert data["message"] == "Navigation rule 0 matched"
        assert data["level"] == "INFO"
        assert data["form_id"] == "contact"
        assert data["step_id"] == "about"
        assert "msg" not in data

    def test_development_formatter_shows_context(self):
        text = DevelopmentFormatter().format(_record(step_id="about"))
        assert "Navigation rule 0 matched" in text
        assert "[step_id=about]" in text
        assert "form_id" not in text


class TestSettings:
    """Tests for Settings class."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.forms_dir == "./forms"
        assert settings.custom_rules_enabled is True

    def test_environment_normalized(self):
        assert Settings(environment="Production", _env_file=None).is_production

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="qa", _env_file=None)

    def test_log_level_upper_cased(self):
        assert Settings(log_level="debug", _env_file=None).log_level == "DEBUG"

    def test_allowed_origins_list(self):
        settings = Settings(allowed_origins="https://a.example, ,https://b.example", _env_file=None)
        assert settings.get_allowed_origins_list() == ["https://a.example", "https://b.example"]

    def test_reads_environment(self):
        with patch.dict("os.environ", {"FORMS_DIR": "/srv/forms", "CUSTOM_RULES_ENABLED": "false"}):
            settings = get_settings()
        assert settings.forms_dir == "/srv/forms"
        assert settings.custom_rules_enabled is False
