import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config_loader import (
    ENV_ERROR_POLICY,
    ENV_LOG_LEVEL,
    ENV_TRACE_DISPATCH,
    load_settings,
)
from core.config_models import BusSettings, ErrorPolicy, parse_flag


@pytest.fixture(autouse=True)
def clean_env():
    names = (ENV_ERROR_POLICY, ENV_LOG_LEVEL, ENV_TRACE_DISPATCH)
    for name in names:
        os.environ.pop(name, None)

    yield

    for name in names:
        os.environ.pop(name, None)


def test_load_settings_from_yaml(tmp_path: Path):
    config_path = tmp_path / "bus.yaml"
    config_path.write_text(
        """
event_bus:
  error_policy: "isolate"
  log_level: "debug"
  trace_dispatch: true
""",
        encoding="utf-8",
    )

    settings = load_settings(config_path=config_path)

    assert settings.error_policy is ErrorPolicy.ISOLATE
    assert settings.log_level == "DEBUG"
    assert settings.trace_dispatch is True


def test_defaults_when_section_missing(tmp_path: Path):
    config_path = tmp_path / "bus.yaml"
    config_path.write_text("other: 1\n", encoding="utf-8")

    settings = load_settings(config_path=config_path)

    assert settings == BusSettings()


def test_env_file_overrides_yaml(tmp_path: Path):
    config_path = tmp_path / "bus.yaml"
    config_path.write_text("event_bus:\n  error_policy: propagate\n", encoding="utf-8")
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join([f"{ENV_ERROR_POLICY}=isolate", f"{ENV_TRACE_DISPATCH}=yes"]),
        encoding="utf-8",
    )

    settings = load_settings(config_path=config_path, env_path=env_path)

    assert settings.error_policy is ErrorPolicy.ISOLATE
    assert settings.trace_dispatch is True


def test_process_env_wins_over_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    config_path = tmp_path / "bus.yaml"
    config_path.write_text("event_bus: {}\n", encoding="utf-8")
    env_path = tmp_path / ".env"
    env_path.write_text(f"{ENV_LOG_LEVEL}=ERROR\n", encoding="utf-8")
    monkeypatch.setenv(ENV_LOG_LEVEL, "warning")

    settings = load_settings(config_path=config_path, env_path=env_path)

    assert settings.log_level == "WARNING"


def test_unknown_error_policy_rejected(tmp_path: Path):
    config_path = tmp_path / "bus.yaml"
    config_path.write_text("event_bus:\n  error_policy: swallow\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings(config_path=config_path)


def test_missing_explicit_config_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_settings(config_path=tmp_path / "absent.yaml")


def test_from_dict_handles_empty_input():
    assert BusSettings.from_dict(None) == BusSettings()
    assert BusSettings.from_dict({}) == BusSettings()


def test_quoted_false_flag_stays_false(tmp_path: Path):
    config_path = tmp_path / "bus.yaml"
    config_path.write_text('event_bus:\n  trace_dispatch: "false"\n', encoding="utf-8")

    settings = load_settings(config_path=config_path)

    assert settings.trace_dispatch is False
    assert BusSettings.from_dict({"trace_dispatch": "off"}).trace_dispatch is False
    assert BusSettings.from_dict({"trace_dispatch": "Yes"}).trace_dispatch is True


def test_parse_flag():
    assert parse_flag(True) is True
    assert parse_flag(0) is False
    assert parse_flag(" on ") is True
    assert parse_flag("no") is False
