"""Emit a scripted sequence of events through a bus and log what was delivered."""

from __future__ import annotations

import argparse
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml

from core.config_loader import load_settings
from core.config_models import BusSettings
from core.event_bus import EventBus, create_event_bus
from core.events import WILDCARD, WildcardEvent

LOGGER = logging.getLogger(__name__)


def configure_logging(settings: BusSettings) -> None:
    level = getattr(logging, settings.log_level, logging.INFO)
    if settings.trace_dispatch:
        # dispatch traces are DEBUG records
        level = min(level, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Event bus demo driver")
    parser.add_argument("--events", type=Path, required=True, help="YAML file with an 'events' list")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--env", type=Path, default=None, help=".env file with overrides")
    return parser.parse_args(argv)


def load_script(path: Path) -> List[Dict[str, object]]:
    with open(path, "r", encoding="utf-8") as fp:
        document = yaml.safe_load(fp) or {}
    entries = document.get("events") if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise ValueError(f"{path}: expected an 'events' list")
    script: List[Dict[str, object]] = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ValueError(f"{path}: every event needs a 'name'")
        script.append({"name": str(entry["name"]), "payload": entry.get("payload")})
    return script


def run_script(bus: EventBus, script: List[Dict[str, object]]) -> Counter:
    """Emit every scripted event; return how many times each name was seen."""

    seen: Counter = Counter()

    def _observe(event: WildcardEvent) -> None:
        seen[event.event_name] += 1
        LOGGER.info("event %s payload=%r", event.event_name, event.payload)

    unsubscribe = bus.on(WILDCARD, _observe)
    try:
        for entry in script:
            bus.emit(str(entry["name"]), entry["payload"])
    finally:
        unsubscribe()
    return seen


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings(config_path=args.config, env_path=args.env)
    configure_logging(settings)

    script = load_script(args.events)
    bus = create_event_bus(settings)
    seen = run_script(bus, script)
    for name, count in sorted(seen.items()):
        print(f"{name}: {count}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
