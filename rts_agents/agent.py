"""
Agent - Base capability contract for every decision-maker in a game slot.

The simulation driver only ever talks to an agent through four calls:

- set_id(agent_id): bind the player slot, once
- set_state(state): bind the shared, read-only GameState reference, once
- act(tick, action, cancel): write one action for the tick, or abstain
- game_end(tick): episode finished, called exactly once per episode

Subclasses customize behavior through the on_* hooks. Composite agents
(MixingAgent) forward the binding hooks to the sub-agents they own.
"""

import logging
import threading
from typing import Optional

from rts_agents.actions import Action
from rts_agents.state import GameState

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when an agent tree is wired up inconsistently."""


class CancelToken:
    """
    Cooperative cancellation flag threaded through act().

    Setting the token never interrupts anything by itself; slow steps
    poll it and return early.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; returns True if cancelled meanwhile."""
        return self._event.wait(timeout)


class Agent:
    """
    Base class for all agents.

    An agent is bound to exactly one id and one state reference. Both
    bindings are immutable: re-binding to the same value is a no-op,
    re-binding to a different value is a ConfigurationError.
    """

    def __init__(self, name: str = "", fog_of_war: bool = True):
        self.name = name or type(self).__name__
        self.fog_of_war = fog_of_war

        self._id: Optional[int] = None
        self._state: Optional[GameState] = None

        # Per-episode counters, reset by game_end()
        self.ticks_acted = 0
        self.ticks_abstained = 0
        self.episodes_finished = 0

    @property
    def id(self) -> Optional[int]:
        return self._id

    @property
    def state(self) -> Optional[GameState]:
        return self._state

    def set_id(self, agent_id: int):
        if self._id is not None:
            if self._id == agent_id:
                return
            raise ConfigurationError(
                f"{self.name}: id already bound to {self._id}, got {agent_id}"
            )
        self._id = agent_id
        self.on_set_id()

    def set_state(self, state: GameState):
        if self._state is not None:
            if self._state is state:
                return
            raise ConfigurationError(f"{self.name}: state already bound")
        self._state = state
        self.on_set_state()

    def act(self, tick: int, action: Action,
            cancel: Optional[CancelToken] = None) -> bool:
        """
        Write exactly one action for `tick` into `action`.

        Returns False to abstain this tick. Abstaining is not an error.
        """
        if cancel is None:
            cancel = CancelToken()
        acted = self.on_act(tick, action, cancel)
        if acted:
            self.ticks_acted += 1
        else:
            self.ticks_abstained += 1
        return acted

    def game_end(self, tick: int) -> bool:
        result = self.on_game_end(tick)
        self.episodes_finished += 1
        logger.debug(
            f"{self.name} (id={self._id}) episode {self.episodes_finished} "
            f"ended at tick {tick}: acted={self.ticks_acted} "
            f"abstained={self.ticks_abstained}"
        )
        self.ticks_acted = 0
        self.ticks_abstained = 0
        return result

    # -- hooks -------------------------------------------------------------

    def on_set_id(self):
        pass

    def on_set_state(self):
        pass

    def on_act(self, tick: int, action: Action, cancel: CancelToken) -> bool:
        raise NotImplementedError

    def on_game_end(self, tick: int) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, id={self._id})"
