"""
Rule Agents - Scripted, non-learned policies for a game slot.

Rule agents read the bound GameState directly (filtered through fog of war
when enabled), never block and never talk to an inference channel. They
are used as standalone opponents and as the backup policy inside a
MixingAgent curriculum.

Available variants:
- SimpleAgent ("ai_simple"): economy, one barracks, melee army, attack
  once the army is large enough
- HitAndRunAgent ("ai_hit_and_run"): same economy, ranged army that
  shoots from range and backs off from melee attackers
"""

from typing import Dict, List, Optional, Tuple, Type

from rts_agents.agent import Agent, CancelToken
from rts_agents.actions import Action
from rts_agents.state import (
    GameState, UnitType, UnitView, UNIT_COST,
    player_units, enemy_units, resource_deposits,
)


class RuleAgent(Agent):
    """
    Base class for scripted agents.

    Subclasses set `army_type` and implement _command_army(). The shared
    economy logic (workers, harvesting, barracks, unit production) lives
    here.
    """

    army_type = UnitType.LIGHT
    worker_quota = 3
    attack_army_size = 4

    def __init__(self, name: str = "", fog_of_war: bool = True):
        super().__init__(name=name, fog_of_war=fog_of_war)

    def on_act(self, tick: int, action: Action, cancel: CancelToken) -> bool:
        state, player = self.state, self.id
        issued_before = len(action.unit_commands)

        self._command_economy(state, player, action, state.resources(player))
        self._command_army(state, player, action)

        return len(action.unit_commands) > issued_before

    # -- economy -----------------------------------------------------------

    def _command_economy(self, state: GameState, player: int,
                         action: Action, budget: int) -> int:
        workers = player_units(state, player, UnitType.WORKER)
        bases = player_units(state, player, UnitType.BASE)
        barracks = player_units(state, player, UnitType.BARRACKS)
        deposits = resource_deposits(state, player, self.fog_of_war)

        for base in bases:
            if (base.idle and len(workers) < self.worker_quota
                    and budget >= UNIT_COST[UnitType.WORKER]):
                action.build(base.unit_id, UnitType.WORKER)
                budget -= UNIT_COST[UnitType.WORKER]

        for barrack in barracks:
            if barrack.idle and budget >= UNIT_COST[self.army_type]:
                action.build(barrack.unit_id, self.army_type)
                budget -= UNIT_COST[self.army_type]

        builder = workers[0] if workers else None
        if (builder is not None and builder.idle and not barracks
                and budget >= UNIT_COST[UnitType.BARRACKS]):
            x, y = self._build_site(builder, state)
            action.build(builder.unit_id, UnitType.BARRACKS, x, y)
            budget -= UNIT_COST[UnitType.BARRACKS]

        for worker in workers:
            if not worker.idle or worker.unit_id in action.unit_commands:
                continue
            deposit = self._find_nearest(worker, deposits)
            if deposit is not None:
                action.gather(worker.unit_id, deposit.unit_id)

        return budget

    # -- army --------------------------------------------------------------

    def _command_army(self, state: GameState, player: int, action: Action):
        raise NotImplementedError

    def _army(self, state: GameState, player: int) -> List[UnitView]:
        return [u for u in player_units(state, player) if u.is_combat]

    # -- helpers -----------------------------------------------------------

    def _find_nearest(self, unit: UnitView,
                      targets: List[UnitView]) -> Optional[UnitView]:
        if not targets:
            return None
        return min(targets, key=lambda t: (unit.distance_to(t.x, t.y), t.unit_id))

    def _enemy_base_estimate(self, state: GameState,
                             player: int) -> Tuple[int, int]:
        """Mirror of our base position; maps are point-symmetric."""
        bases = player_units(state, player, UnitType.BASE)
        if bases:
            bx, by = bases[0].x, bases[0].y
        else:
            bx, by = 0, 0
        return state.width - 1 - bx, state.height - 1 - by

    def _build_site(self, unit: UnitView, state: GameState) -> Tuple[int, int]:
        """Cell next to `unit`, stepping toward the map center."""
        dx = 1 if unit.x < state.width // 2 else -1
        dy = 1 if unit.y < state.height // 2 else -1
        return self._clip(unit.x + dx, unit.y + dy, state)

    def _step_away(self, unit: UnitView, threat: UnitView,
                   state: GameState) -> Tuple[int, int]:
        dx = (unit.x > threat.x) - (unit.x < threat.x)
        dy = (unit.y > threat.y) - (unit.y < threat.y)
        if dx == 0 and dy == 0:
            dx = 1
        return self._clip(unit.x + dx, unit.y + dy, state)

    @staticmethod
    def _clip(x: int, y: int, state: GameState) -> Tuple[int, int]:
        return (min(max(x, 0), state.width - 1),
                min(max(y, 0), state.height - 1))


class SimpleAgent(RuleAgent):
    """
    Simple rush:
    1. Keep 3 workers harvesting
    2. Build one barracks, produce light (melee) units
    3. Once 4+ combat units exist, send idle ones at the nearest enemy
    """

    army_type = UnitType.LIGHT
    worker_quota = 3
    attack_army_size = 4

    def _command_army(self, state: GameState, player: int, action: Action):
        army = self._army(state, player)
        if len(army) < self.attack_army_size:
            return
        enemies = enemy_units(state, player, self.fog_of_war)
        for unit in army:
            if not unit.idle:
                continue
            enemy = self._find_nearest(unit, enemies)
            if enemy is not None:
                action.attack(unit.unit_id, enemy.unit_id)
            else:
                x, y = self._enemy_base_estimate(state, player)
                action.move(unit.unit_id, x, y)


class HitAndRunAgent(RuleAgent):
    """
    Ranged harassment:
    1. Same economy as SimpleAgent
    2. Produce ranged units
    3. Shoot anything in range, step back from melee units that close in
    4. Advance on the enemy once 3+ ranged units exist
    """

    army_type = UnitType.RANGED
    worker_quota = 3
    attack_army_size = 3

    def _command_army(self, state: GameState, player: int, action: Action):
        army = self._army(state, player)
        enemies = enemy_units(state, player, self.fog_of_war)

        for unit in army:
            enemy = self._find_nearest(unit, enemies)
            if enemy is None:
                if unit.idle and len(army) >= self.attack_army_size:
                    x, y = self._enemy_base_estimate(state, player)
                    action.move(unit.unit_id, x, y)
                continue

            melee_threat = (enemy.unit_type in (UnitType.LIGHT, UnitType.HEAVY,
                                                UnitType.WORKER)
                            and unit.distance_to(enemy.x, enemy.y) <= 1)
            if melee_threat:
                x, y = self._step_away(unit, enemy, state)
                action.move(unit.unit_id, x, y)
            elif unit.in_attack_range(enemy.x, enemy.y):
                action.attack(unit.unit_id, enemy.unit_id)
            elif unit.idle and len(army) >= self.attack_army_size:
                action.move(unit.unit_id, enemy.x, enemy.y)


RULE_AGENTS: Dict[str, Type[RuleAgent]] = {
    'ai_simple': SimpleAgent,
    'ai_hit_and_run': HitAndRunAgent,
}


def make_rule_agent(name: str, fog_of_war: bool = True) -> Optional[RuleAgent]:
    """Build a rule agent by registry name (case-insensitive), or None if unknown."""
    cls = RULE_AGENTS.get(name.strip().lower())
    if cls is None:
        return None
    return cls(name=name.strip().lower(), fog_of_war=fog_of_war)
