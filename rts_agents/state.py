"""
Game State View - The read-only surface agents see of the simulation.

The simulation itself (map, rules, unit bookkeeping) lives outside this
package. Agents hold a non-owning reference to anything that satisfies the
GameState protocol below and never mutate it; the driver applies the
Actions they return.

Unit types and costs follow the MicroRTS definitions:
- Resource: Neutral harvestable deposit (player == -1)
- Base: Produces workers, stores returned resources
- Barracks: Produces combat units (light/melee, heavy, ranged)
- Worker: Harvests resources, builds structures
- Light, Heavy, Ranged: Combat units
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import List, Optional, Protocol


class UnitType(IntEnum):
    RESOURCE = 0
    BASE = 1
    BARRACKS = 2
    WORKER = 3
    LIGHT = 4
    HEAVY = 5
    RANGED = 6


UNIT_COST = {
    UnitType.RESOURCE: 0,
    UnitType.BASE: 10,
    UnitType.BARRACKS: 5,
    UnitType.WORKER: 1,
    UnitType.LIGHT: 2,
    UnitType.HEAVY: 3,
    UnitType.RANGED: 2,
}

COMBAT_TYPES = (UnitType.LIGHT, UnitType.HEAVY, UnitType.RANGED)
STRUCTURE_TYPES = (UnitType.BASE, UnitType.BARRACKS)

NEUTRAL_PLAYER = -1


@dataclass(frozen=True)
class UnitView:
    """Snapshot of a single unit as exposed by the simulation."""
    unit_id: int
    unit_type: UnitType
    player: int
    x: int
    y: int
    hp: int = 1
    max_hp: int = 1
    attack_range: int = 0
    resources_carried: int = 0
    idle: bool = True

    @property
    def is_structure(self) -> bool:
        return self.unit_type in STRUCTURE_TYPES

    @property
    def is_combat(self) -> bool:
        return self.unit_type in COMBAT_TYPES

    def distance_to(self, x: int, y: int) -> int:
        """Manhattan distance."""
        return abs(self.x - x) + abs(self.y - y)

    def in_attack_range(self, x: int, y: int) -> bool:
        if self.attack_range <= 0:
            return False
        return max(abs(self.x - x), abs(self.y - y)) <= self.attack_range


class GameState(Protocol):
    """What the driver's simulation state must expose to agents."""

    tick: int
    max_ticks: int
    width: int
    height: int

    def resources(self, player: int) -> int:
        ...

    def units(self) -> List[UnitView]:
        ...

    def is_visible(self, player: int, x: int, y: int) -> bool:
        ...


def player_units(state: GameState, player: int,
                 unit_type: Optional[UnitType] = None) -> List[UnitView]:
    """Units owned by `player`, optionally of one type. Own units are always visible."""
    return [u for u in state.units()
            if u.player == player
            and (unit_type is None or u.unit_type == unit_type)]


def enemy_units(state: GameState, player: int,
                fog_of_war: bool = True) -> List[UnitView]:
    """Opponent units, filtered to what `player` can currently see under fog of war."""
    enemies = [u for u in state.units()
               if u.player != player and u.player != NEUTRAL_PLAYER]
    if not fog_of_war:
        return enemies
    return [u for u in enemies if state.is_visible(player, u.x, u.y)]


def opponents(state: GameState, player: int) -> List[int]:
    """Ids of every other player that still owns a unit."""
    return sorted({u.player for u in state.units()
                   if u.player != player and u.player != NEUTRAL_PLAYER})


def resource_deposits(state: GameState, player: int,
                      fog_of_war: bool = True) -> List[UnitView]:
    deposits = [u for u in state.units() if u.player == NEUTRAL_PLAYER]
    if not fog_of_war:
        return deposits
    return [u for u in deposits if state.is_visible(player, u.x, u.y)]
