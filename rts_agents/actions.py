"""
Action System - What an agent hands back to the driver each tick.

Two kinds of decisions share one Action container:

- Unit commands, issued by rule agents, one per unit:
    MOVE / ATTACK / GATHER / BUILD targeting a cell or unit
- A strategic command, issued by trained agents, chosen from a small closed
  set of macro actions that the driver expands into unit commands

The driver creates an empty Action per slot per tick and passes it to
Agent.act(), which fills it in.
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import Dict, Optional

from rts_agents.state import UnitType


class CommandType(IntEnum):
    MOVE = 0
    ATTACK = 1
    GATHER = 2
    BUILD = 3


class StrategicCommand(IntEnum):
    IDLE = 0
    BUILD_WORKER = 1
    BUILD_BARRACKS = 2
    BUILD_MELEE = 3
    BUILD_RANGED = 4
    HIT_AND_RUN = 5
    ATTACK = 6
    ATTACK_IN_RANGE = 7
    ALL_DEFEND = 8


NUM_STRATEGIC_COMMANDS = len(StrategicCommand)


@dataclass(frozen=True)
class UnitCommand:
    """A single command for one unit."""
    unit_id: int
    command_type: CommandType
    target_x: Optional[int] = None
    target_y: Optional[int] = None
    target_id: Optional[int] = None      # For attack / gather
    build_type: Optional[UnitType] = None  # For build


@dataclass
class Action:
    """Everything one agent decided for one tick."""
    strategic: Optional[StrategicCommand] = None
    unit_commands: Dict[int, UnitCommand] = field(default_factory=dict)

    def issue(self, command: UnitCommand):
        self.unit_commands[command.unit_id] = command

    def move(self, unit_id: int, x: int, y: int):
        self.issue(UnitCommand(unit_id, CommandType.MOVE, target_x=x, target_y=y))

    def attack(self, unit_id: int, target_id: int):
        self.issue(UnitCommand(unit_id, CommandType.ATTACK, target_id=target_id))

    def gather(self, unit_id: int, resource_id: int):
        self.issue(UnitCommand(unit_id, CommandType.GATHER, target_id=resource_id))

    def build(self, unit_id: int, build_type: UnitType,
              x: Optional[int] = None, y: Optional[int] = None):
        self.issue(UnitCommand(unit_id, CommandType.BUILD,
                               target_x=x, target_y=y, build_type=build_type))

    @property
    def is_empty(self) -> bool:
        return self.strategic is None and not self.unit_commands

    def clear(self):
        self.strategic = None
        self.unit_commands.clear()
