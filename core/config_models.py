"""Runtime settings for an event bus instance."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

TRUTHY = {"1", "true", "yes", "on"}


def parse_flag(value: object) -> bool:
    """Read a YAML or env flag; strings count only when they spell a truthy word."""

    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


class ErrorPolicy(str, Enum):
    """What happens when a handler raises during ``emit``."""

    PROPAGATE = "propagate"
    ISOLATE = "isolate"


@dataclass(slots=True)
class BusSettings:
    """Behaviour switches, loaded from YAML/env or built directly.

    ``trace_dispatch`` logs at DEBUG; ``run.configure_logging`` lowers the
    level to DEBUG when it is set.
    """

    error_policy: ErrorPolicy = ErrorPolicy.PROPAGATE
    log_level: str = "INFO"
    trace_dispatch: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, object]]) -> "BusSettings":
        if not data:
            return cls()
        policy = ErrorPolicy(str(data.get("error_policy", "propagate")).lower())
        log_level = str(data.get("log_level", "INFO")).upper()
        trace = parse_flag(data.get("trace_dispatch", False))
        return cls(error_policy=policy, log_level=log_level, trace_dispatch=trace)
