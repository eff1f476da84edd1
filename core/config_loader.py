"""Load :class:`BusSettings` from YAML, a ``.env`` file and the environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv

from core.config_models import BusSettings, parse_flag

ENV_ERROR_POLICY = "EVENT_BUS_ERROR_POLICY"
ENV_LOG_LEVEL = "EVENT_BUS_LOG_LEVEL"
ENV_TRACE_DISPATCH = "EVENT_BUS_TRACE_DISPATCH"


def _env_overrides() -> Dict[str, object]:
    overrides: Dict[str, object] = {}
    policy = os.getenv(ENV_ERROR_POLICY)
    if policy:
        overrides["error_policy"] = policy
    level = os.getenv(ENV_LOG_LEVEL)
    if level:
        overrides["log_level"] = level
    trace = os.getenv(ENV_TRACE_DISPATCH)
    if trace is not None and trace.strip():
        overrides["trace_dispatch"] = parse_flag(trace)
    return overrides


def load_settings(
    config_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> BusSettings:
    """Read the ``event_bus`` section of a YAML file, then apply env overrides.

    An explicit ``config_path`` must exist. Without one, ``bus.yaml`` at the
    project root is used when present and defaults otherwise.
    """

    base_path = Path(__file__).resolve().parents[1]
    if env_path is None:
        default_env = base_path / ".env"
        if default_env.exists():
            env_path = default_env
    if env_path is not None:
        load_dotenv(dotenv_path=env_path, override=False)

    if config_path is None:
        default_config = base_path / "bus.yaml"
        if default_config.exists():
            config_path = default_config

    data: Dict[str, object] = {}
    if config_path is not None:
        with open(config_path, "r", encoding="utf-8") as fp:
            document = yaml.safe_load(fp) or {}
        section = document.get("event_bus") if isinstance(document, dict) else None
        if section:
            data.update(section)

    data.update(_env_overrides())
    return BusSettings.from_dict(data)
