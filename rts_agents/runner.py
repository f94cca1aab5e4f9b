"""
Episode Runner - Reference driver for one game instance.

Drives a single environment tick by tick:
1. bind every agent to its slot id and the shared state (once)
2. per tick, call act() once per slot, in slot order
3. hand the produced actions to the environment
4. after the last tick, call game_end() once per agent

One runner owns one environment and one agent tree; run several runners
on separate threads or processes for parallel games.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from rts_agents.agent import Agent, CancelToken
from rts_agents.actions import Action
from rts_agents.state import GameState

logger = logging.getLogger(__name__)


class Environment(Protocol):
    """Simulation side of the driver. reset() must reuse the same state object."""

    state: GameState

    def reset(self):
        ...

    def step(self, actions: Dict[int, Action]) -> bool:
        """Apply actions, advance one tick, return True when the game is over."""
        ...


@dataclass
class EpisodeResult:
    ticks: int = 0
    cancelled: bool = False
    results: Dict[int, bool] = field(default_factory=dict)
    actions_applied: Dict[int, int] = field(default_factory=dict)
    abstentions: Dict[int, int] = field(default_factory=dict)


class EpisodeRunner:
    def __init__(self, env: Environment, agents: List[Agent]):
        self.env = env
        self.agents = agents
        self.episodes_played = 0
        self._bound = False

    def bind(self):
        if self._bound:
            return
        for slot, agent in enumerate(self.agents):
            agent.set_id(slot)
            agent.set_state(self.env.state)
        self._bound = True

    def run_episode(self, max_ticks: Optional[int] = None,
                    cancel: Optional[CancelToken] = None) -> EpisodeResult:
        self.bind()
        cancel = cancel if cancel is not None else CancelToken()
        self.env.reset()

        result = EpisodeResult()
        for slot in range(len(self.agents)):
            result.actions_applied[slot] = 0
            result.abstentions[slot] = 0

        tick = 0
        done = False
        while not done:
            if max_ticks is not None and tick >= max_ticks:
                break
            if cancel.is_cancelled:
                result.cancelled = True
                break

            actions: Dict[int, Action] = {}
            for slot, agent in enumerate(self.agents):
                action = Action()
                if agent.act(tick, action, cancel):
                    actions[slot] = action
                    result.actions_applied[slot] += 1
                else:
                    result.abstentions[slot] += 1

            done = self.env.step(actions)
            tick += 1

        result.ticks = tick
        last_tick = max(tick - 1, 0)
        for slot, agent in enumerate(self.agents):
            result.results[slot] = agent.game_end(last_tick)

        self.episodes_played += 1
        logger.info(
            f"Episode {self.episodes_played} finished after {tick} ticks"
            f"{' (cancelled)' if result.cancelled else ''}: results={result.results}"
        )
        return result
