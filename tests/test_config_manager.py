import json
from pathlib import Path

import pytest

import cinelingo
from cinelingo import config_manager as cfg


def test_defaults_come_from_config_file() -> None:
    settings = cfg.get_settings()

    assert settings.loop_margin_seconds == pytest.approx(0.1)
    assert settings.playback_rates == [0.75, 1.0, 1.25, 1.5]
    assert cfg.get_settings() is settings


def test_override_file_is_merged(tmp_path) -> None:
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"loop_margin_seconds": 0.25, "llm_model": "llama3"}))

    settings = cfg.load_configuration(str(override))

    assert settings.loop_margin_seconds == pytest.approx(0.25)
    assert settings.llm_model == "llama3"
    assert settings.playback_rates == [0.75, 1.0, 1.25, 1.5]


def test_unreadable_override_is_ignored(tmp_path) -> None:
    override = tmp_path / "broken.json"
    override.write_text("{not json")

    settings = cfg.load_configuration(str(override))

    assert settings.loop_margin_seconds == pytest.approx(0.1)


@pytest.mark.parametrize(
    "payload",
    [{"loop_margin_seconds": -1}, {"playback_rates": []}, {"playback_rates": [1.0, 0]}],
)
def test_invalid_configuration_raises(tmp_path, payload) -> None:
    override = tmp_path / "invalid.json"
    override.write_text(json.dumps(payload))

    with pytest.raises(RuntimeError):
        cfg.load_configuration(str(override))


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("CINELINGO_LLM_URL", "http://llm.internal:11434/api/chat")
    monkeypatch.setenv("CINELINGO_LLM_MODEL", "qwen2")
    monkeypatch.setenv("OLLAMA_API_KEY", "secret-token")
    monkeypatch.setenv("CINELINGO_LLM_TIMEOUT_SECONDS", "12")

    settings = cfg.load_configuration()

    assert cfg.get_llm_url() == "http://llm.internal:11434/api/chat"
    assert settings.llm_model == "qwen2"
    assert settings.llm_timeout_seconds == 12
    assert cfg.get_llm_api_key() == "secret-token"


def test_invalid_environment_override_is_ignored(monkeypatch) -> None:
    monkeypatch.setenv("CINELINGO_LLM_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("CINELINGO_LLM_MODEL", "qwen2")

    settings = cfg.load_configuration()

    assert settings.llm_timeout_seconds == 45
    assert settings.llm_model != "qwen2"


def test_export_settings_hides_secrets(monkeypatch) -> None:
    monkeypatch.setenv("CINELINGO_LLM_API_KEY", "secret-token")

    exported = cfg.export_settings(cfg.load_configuration())

    assert "llm_api_key" not in exported
    assert exported["llm_model"]


def test_default_config_ships_inside_package() -> None:
    package_dir = Path(cinelingo.__file__).resolve().parent

    assert cfg.DEFAULT_CONFIG_PATH.is_file()
    assert cfg.DEFAULT_CONFIG_PATH.parent.parent == package_dir


def test_defaults_do_not_depend_on_working_directory(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    settings = cfg.load_configuration()

    assert settings.playback_rates == [0.75, 1.0, 1.25, 1.5]
    assert settings.annotation_context == "General conversation"
