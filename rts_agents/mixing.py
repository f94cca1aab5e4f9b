"""
Mixing Agent - Per-episode curriculum between a scripted and a main policy.

During an episode the backup (rule) agent plays ticks [0, threshold), then
the main agent takes over for good. After every episode:

    latest_start *= decay
    threshold ~ Uniform{0, ..., round(latest_start)}

so early in training the main policy mostly sees mid-game positions reached
by the scripted player, and gradually has to play whole games itself.

The first episode uses threshold 0: the main agent plays it entirely.
"""

import logging
import random
from typing import Optional

from rts_agents.agent import Agent, CancelToken, ConfigurationError
from rts_agents.actions import Action
from rts_agents.options import CurriculumConfig, parse_curriculum_args
from rts_agents.rule_agents import make_rule_agent

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(value + 0.5)


class MixingAgent(Agent):
    def __init__(self, name: str = "", fog_of_war: bool = True, args: str = "",
                 rng: Optional[random.Random] = None):
        super().__init__(name=name, fog_of_war=fog_of_war)
        self.config: CurriculumConfig = parse_curriculum_args(args)

        self.latest_start: float = float(self.config.start)
        self.decay: float = self.config.decay
        self.threshold: int = 0
        self.rng = rng if rng is not None else random.Random()

        self.backup: Optional[Agent] = None
        self.main: Optional[Agent] = None

        if self.config.backup is not None:
            self.backup = make_rule_agent(self.config.backup, fog_of_war=fog_of_war)
            if self.backup is None:
                logger.warning(
                    f"{self.name}: unknown backup agent {self.config.backup!r}, "
                    f"main agent will play every tick"
                )

        logger.info(
            f"{self.name}: latest_start={self.latest_start} decay={self.decay} "
            f"backup={self.backup.name if self.backup else None}"
        )

    def set_main_agent(self, agent: Agent):
        """Install (or replace) the main agent and bind it to our id/state."""
        self.main = agent
        if self.id is not None:
            agent.set_id(self.id)
        if self.state is not None:
            agent.set_state(self.state)

    def uses_backup(self, tick: int) -> bool:
        return self.backup is not None and tick < self.threshold

    def on_set_id(self):
        for child in (self.backup, self.main):
            if child is not None:
                child.set_id(self.id)

    def on_set_state(self):
        for child in (self.backup, self.main):
            if child is not None:
                child.set_state(self.state)

    def on_act(self, tick: int, action: Action, cancel: CancelToken) -> bool:
        if self.main is None:
            raise ConfigurationError(f"{self.name}: act() called before set_main_agent()")
        if self.uses_backup(tick):
            return self.backup.act(tick, action, cancel)
        return self.main.act(tick, action, cancel)

    def on_game_end(self, tick: int) -> bool:
        if self.main is None:
            raise ConfigurationError(f"{self.name}: game_end() called before set_main_agent()")

        # Episodes always end with the main agent; its verdict is ours
        result = self.main.game_end(tick)
        if self.backup is not None:
            self.backup.game_end(tick)

        self.latest_start *= self.decay
        self.threshold = self.rng.randint(0, round_half_up(self.latest_start))

        logger.debug(
            f"{self.name}: next episode threshold={self.threshold} "
            f"(latest_start={self.latest_start:.2f})"
        )
        return result
