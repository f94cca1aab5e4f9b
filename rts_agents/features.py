"""
Feature Extraction - Summarize a GameState as a fixed-length vector.

The trained agent's inference channel consumes a short history of these
vectors. Each vector captures, from one player's perspective:
- Resource counts
- Unit composition (own and enemy)
- Military strength ratio
- Territory (unit centroids)
- Game phase and economy indicators

With fog of war on, enemy-derived features only see enemy units on
currently visible cells, and the enemy resource count is masked out.
"""

import numpy as np
from typing import List

from rts_agents.state import (
    GameState, UnitType, UnitView,
    player_units, enemy_units, resource_deposits, opponents,
)

_COUNTED_TYPES = [UnitType.WORKER, UnitType.LIGHT, UnitType.HEAVY,
                  UnitType.RANGED, UnitType.BASE, UnitType.BARRACKS]

FEATURE_NAMES: List[str] = (
    ['my_resources', 'enemy_resources']
    + [f'{side}_{ut.name.lower()}' for ut in _COUNTED_TYPES
       for side in ('my', 'enemy')]
    + ['my_power', 'enemy_power',
       'my_cx', 'my_cy', 'enemy_cx', 'enemy_cy',
       'game_phase', 'worker_rate', 'visible_resources', 'fog_of_war']
)

FEATURE_DIM = len(FEATURE_NAMES)


class FeatureExtractor:
    """Turns a GameState into a float32 FeatureVector of length FEATURE_DIM."""

    def __init__(self, fog_of_war: bool = True):
        self.fog_of_war = fog_of_war

    def extract(self, state: GameState, player: int) -> np.ndarray:
        features = []

        my_units = player_units(state, player)
        enemies = enemy_units(state, player, self.fog_of_war)

        # Resources; the opponent's bank is not observable under fog of war
        features.append(min(state.resources(player) / 20.0, 1.0))
        if self.fog_of_war:
            features.append(0.0)
        else:
            enemy_bank = sum(state.resources(p) for p in opponents(state, player))
            features.append(min(enemy_bank / 20.0, 1.0))

        for ut in _COUNTED_TYPES:
            my_count = sum(1 for u in my_units if u.unit_type == ut)
            enemy_count = sum(1 for u in enemies if u.unit_type == ut)
            features.append(min(my_count / 10.0, 1.0))
            features.append(min(enemy_count / 10.0, 1.0))

        # Military power (combat HP share)
        my_power = sum(u.hp for u in my_units if u.is_combat)
        enemy_power = sum(u.hp for u in enemies if u.is_combat)
        total_power = max(my_power + enemy_power, 1)
        features.append(my_power / total_power)
        features.append(enemy_power / total_power)

        features.extend(self._centroid(my_units, state, default=0.0))
        features.extend(self._centroid(enemies, state, default=1.0))

        features.append(min(state.tick / max(state.max_ticks, 1), 1.0))

        num_workers = sum(1 for u in my_units if u.unit_type == UnitType.WORKER)
        features.append(min(num_workers / 4.0, 1.0))

        deposits = resource_deposits(state, player, self.fog_of_war)
        features.append(min(len(deposits) / 20.0, 1.0))

        features.append(1.0 if self.fog_of_war else 0.0)

        return np.asarray(features, dtype=np.float32)

    @staticmethod
    def _centroid(units: List[UnitView], state: GameState,
                  default: float) -> List[float]:
        if not units:
            return [default, default]
        cx = sum(u.x for u in units) / len(units) / max(state.width, 1)
        cy = sum(u.y for u in units) / len(units) / max(state.height, 1)
        return [cx, cy]
