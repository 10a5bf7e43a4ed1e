"""Tests for settings validation."""
from config import Settings


def test_production_defaults_report_no_problems():
    settings = Settings(app_env="production")

    assert settings.is_production
    assert settings.validate_required_settings() == []


def test_invalid_rate_and_upload_limit_are_reported():
    problems = Settings(usd_to_aed_rate=0, max_upload_bytes=0).validate_required_settings()

    assert "usd_to_aed_rate must be positive" in problems
    assert "max_upload_bytes must be positive" in problems
    assert len(problems) == 2
