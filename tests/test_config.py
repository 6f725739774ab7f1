import pytest

from healthpath.config import CONFIG_ENV_VAR, DEFAULTS, load_config


def test_partial_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("storage:\n  backend: sql\nreminders:\n  window_days: 3\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg["storage"]["backend"] == "sql"
    assert cfg["storage"]["key"] == DEFAULTS["storage"]["key"]
    assert cfg["reminders"]["window_days"] == 3
    assert cfg["events"]["profile_updated"] == "reportsUpdated"


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_env_var_selects_file(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("logging:\n  format: json\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config()["logging"]["format"] == "json"


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_shipped_config_loads(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    cfg = load_config()
    assert cfg["storage"]["key"] == "healthpath_user_profile"
    assert cfg["growth"]["bmi"]["underweight_below"] == 15.0
