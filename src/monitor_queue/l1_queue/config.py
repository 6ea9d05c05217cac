from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import json

import yaml

from monitor_queue.l0_core.errors import InvalidArgument

DEFAULT_CAPACITY = 5
DEFAULT_NAME = "queue"
DEFAULT_PRODUCERS = 1
DEFAULT_CONSUMERS = 1
DEFAULT_ITEMS_PER_PRODUCER = 10


@dataclass(frozen=True, slots=True)
class QueueConfig:
    """
    Immutable settings for a producer/consumer run.

    Fields
    ------
    capacity : int
        Maximum number of items the shared queue may hold.
    name : str
        Label used in log lines.
    producers : int
        Number of producer threads.
    consumers : int
        Number of consumer threads.
    items_per_producer : int
        How many tagged items each producer inserts.
    """
    capacity: int = DEFAULT_CAPACITY
    name: str = DEFAULT_NAME
    producers: int = DEFAULT_PRODUCERS
    consumers: int = DEFAULT_CONSUMERS
    items_per_producer: int = DEFAULT_ITEMS_PER_PRODUCER

    def __post_init__(self) -> None:
        for field_name in ("capacity", "producers", "consumers"):
            v = getattr(self, field_name)
            if not _is_int(v) or v <= 0:
                raise InvalidArgument(f"{field_name} must be a positive integer, got {v!r}")
        if not _is_int(self.items_per_producer) or self.items_per_producer < 0:
            raise InvalidArgument(
                f"items_per_producer must be a non-negative integer, got {self.items_per_producer!r}")
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgument(f"name must be a non-empty string, got {self.name!r}")


def _is_int(v: object) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _to_int(data: dict, key: str, default: int) -> int:
    v = data.get(key, default)
    # no silent truncation: 2.0 is accepted, 2.7 and true are not
    if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
        raise InvalidArgument(f"{key} must be an integer, got {v!r}")
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"{key} must be an integer, got {v!r}") from e


def load_queue_config(path: str | Path) -> QueueConfig:
    """
    Load a QueueConfig from a YAML or JSON file.

    Supported shapes:
      YAML:
        capacity: 5
        name: jobs
        producers: 3
        consumers: 2
        items_per_producer: 100

      JSON:
        {"capacity": 5, "name": "jobs", "producers": 3, ...}

    Missing keys fall back to the defaults.
    Raises FileNotFoundError / InvalidArgument on bad input.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in {".yml", ".yaml"}:
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text or "{}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise InvalidArgument(f"cannot parse {p}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidArgument(f"{p} must contain a mapping at top level")

    return QueueConfig(
        capacity=_to_int(data, "capacity", DEFAULT_CAPACITY),
        name=str(data.get("name", DEFAULT_NAME)),
        producers=_to_int(data, "producers", DEFAULT_PRODUCERS),
        consumers=_to_int(data, "consumers", DEFAULT_CONSUMERS),
        items_per_producer=_to_int(data, "items_per_producer", DEFAULT_ITEMS_PER_PRODUCER),
    )
