# Di dalam file: test_config.py

import shutil

import pytest
from pydantic import ValidationError

from app.rules.loader import RULES_DIR
from calculator import calculate_inheritance
from config import Settings, get_settings
from schemas import CalculationInput


def test_default():
    settings = Settings(_env_file=None)
    assert settings.max_total_heirs == 100
    assert settings.log_level == "INFO"
    assert settings.rules_dir is None


def test_dari_environment(monkeypatch):
    monkeypatch.setenv("FARAID_MAX_TOTAL_HEIRS", "7")
    monkeypatch.setenv("FARAID_CORS_ORIGINS", '["https://faraid.example"]')
    settings = Settings(_env_file=None)
    assert settings.max_total_heirs == 7
    assert settings.cors_origins == ["https://faraid.example"]


def test_batas_tidak_valid():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, max_total_heirs=0)


def test_get_settings_cached():
    assert get_settings() is get_settings()


def test_rules_dir_override(tmp_path):
    shutil.copy(RULES_DIR / "hanafi.json", tmp_path / "hanafi.json")
    settings = Settings(_env_file=None, rules_dir=str(tmp_path))
    data = CalculationInput(school="hanafi", deceased_gender="male", heirs={"son": 1}, estate_value=10)
    result = calculate_inheritance(data, settings=settings)
    assert result.shares[0].total_amount == 10
