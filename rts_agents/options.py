"""
Agent Options - Static configuration handed to every agent at construction.

AgentOptions mirrors what the game's launcher passes per slot:
    name            - which agent variant to build (see factory.make_agent)
    fog_of_war      - restrict observation to visible cells
    frames_in_state - history length sent to the inference channel
    args            - free-form string, parsed only by MixingAgent

MixingAgent args use "key/value" items separated by "|":
    "start/100|decay/0.9|backup/ai_simple"

Recognized keys:
    start  - initial upper bound (ticks) of the backup prefix; a fractional
             value such as "10.7" is truncated to 10
    decay  - factor in [0, 1] applied to that bound after every episode
    backup - rule agent name used for the prefix
Anything else is logged and skipped.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ITEM_SEPARATOR = '|'
KEY_VALUE_SEPARATOR = '/'


@dataclass
class AgentOptions:
    name: str
    fog_of_war: bool = True
    frames_in_state: int = 1
    args: str = ""
    poll_interval: float = 0.01  # seconds between cancel checks while waiting on inference

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AgentOptions':
        return cls(
            name=data['name'],
            fog_of_war=bool(data.get('fog_of_war', True)),
            frames_in_state=int(data.get('frames_in_state', 1)),
            args=data.get('args', ""),
            poll_interval=float(data.get('poll_interval', 0.01)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CurriculumConfig:
    """Parsed MixingAgent args."""
    start: int = 0
    decay: float = 0.0
    backup: Optional[str] = None


def parse_curriculum_args(args: str) -> CurriculumConfig:
    """
    Parse a MixingAgent args string into a CurriculumConfig.

    Never raises: malformed items, bad values, duplicate and unknown keys
    are logged as warnings and skipped. The first occurrence of a key wins.
    """
    config = CurriculumConfig()
    if not args:
        return config

    seen = set()
    for item in args.split(ITEM_SEPARATOR):
        if not item:
            continue
        kv = item.split(KEY_VALUE_SEPARATOR)
        if len(kv) != 2:
            logger.warning(f"Malformed curriculum item {item!r}, expected key{KEY_VALUE_SEPARATOR}value")
            continue
        key, value = kv[0].strip(), kv[1].strip()

        if key in seen:
            logger.warning(f"Duplicate curriculum key {key!r} ignored")
            continue
        seen.add(key)

        if key == 'start':
            try:
                start = int(float(value))
            except (ValueError, OverflowError):
                logger.warning(f"Invalid start {value!r}, expected an integer tick count")
                continue
            if start < 0:
                logger.warning(f"Invalid start {start}, must be >= 0")
                continue
            config.start = start
        elif key == 'decay':
            try:
                decay = float(value)
            except ValueError:
                logger.warning(f"Invalid decay {value!r}, expected a float")
                continue
            if not 0.0 <= decay <= 1.0:
                logger.warning(f"Invalid decay {decay}, must be in [0, 1]")
                continue
            config.decay = decay
        elif key == 'backup':
            config.backup = value
        else:
            logger.warning(f"Unrecognized (key, value) = ({key}, {value})")

    return config
