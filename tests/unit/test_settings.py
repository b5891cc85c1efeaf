import pytest
from pathlib import Path
from unittest.mock import patch

from pydantic import ValidationError

from storesynth.config.settings import Settings


def test_settings_defaults(tmp_path):
    with patch.dict("os.environ", {}, clear=True):
        settings = Settings(_env_file=None, OUTPUT_DIR=tmp_path / "out")

    assert settings.anthropic_api_key is None
    assert settings.ai_enabled is False
    assert settings.browser_headless is True
    assert settings.navigation_wait_until == "networkidle"
    assert settings.max_candidate_products == 10
    assert settings.raw_html_limit == 10_000
    assert settings.store_host_suffix == "storesynth.app"


def test_settings_reads_environment(tmp_path):
    with patch.dict("os.environ", {
        "ANTHROPIC_API_KEY": "sk-ant-env-key",
        "MAX_CONCURRENT_PAGES": "8",
        "NAVIGATION_TIMEOUT_SECONDS": "12.5",
        "OUTPUT_DIR": str(tmp_path / "env-out"),
    }, clear=True):
        settings = Settings(_env_file=None)

    assert settings.ai_enabled is True
    assert settings.anthropic_api_key.get_secret_value() == "sk-ant-env-key"
    assert settings.max_concurrent_pages == 8
    assert settings.navigation_timeout_ms == 12500


def test_blank_api_key_means_not_configured(settings_without_ai):
    assert settings_without_ai.anthropic_api_key is None
    assert settings_without_ai.ai_enabled is False


def test_invalid_api_key_format_rejected(tmp_path):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, ANTHROPIC_API_KEY="not-a-key", OUTPUT_DIR=tmp_path)


@pytest.mark.parametrize("field", ["MAX_CONCURRENT_PAGES", "MAX_CANDIDATE_PRODUCTS", "RAW_HTML_LIMIT"])
def test_limits_must_be_positive(tmp_path, field):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, OUTPUT_DIR=tmp_path, **{field: 0})


def test_output_dir_is_created(tmp_path):
    target = tmp_path / "nested" / "outputs"
    settings = Settings(_env_file=None, OUTPUT_DIR=str(target))

    assert settings.output_dir == Path(target)
    assert target.is_dir()


def test_navigation_timeout_ms(settings):
    assert settings.navigation_timeout_seconds == 30.0
    assert settings.navigation_timeout_ms == 30000
