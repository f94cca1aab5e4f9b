"""
Agent Factory - Build any agent variant from AgentOptions.

Names:
    ai_simple, ai_hit_and_run  - rule agents (case-insensitive)
    ai_trained                 - TrainedAgent, needs an inference channel
    ai_mixed                   - MixingAgent; pass `main` to install it now
"""

import random
from typing import Optional

from rts_agents.agent import Agent, ConfigurationError
from rts_agents.channel import InferenceChannel
from rts_agents.mixing import MixingAgent
from rts_agents.options import AgentOptions
from rts_agents.rule_agents import make_rule_agent
from rts_agents.trained import TrainedAgent


def make_agent(options: AgentOptions,
               channel: Optional[InferenceChannel] = None,
               main: Optional[Agent] = None,
               rng: Optional[random.Random] = None) -> Agent:
    kind = options.name.strip().lower()

    rule_agent = make_rule_agent(kind, fog_of_war=options.fog_of_war)
    if rule_agent is not None:
        return rule_agent

    if kind == 'ai_trained':
        if channel is None:
            raise ConfigurationError("ai_trained requires an inference channel")
        return TrainedAgent(
            channel,
            name=kind,
            fog_of_war=options.fog_of_war,
            frames_in_state=options.frames_in_state,
            poll_interval=options.poll_interval,
        )

    if kind == 'ai_mixed':
        agent = MixingAgent(name=kind, fog_of_war=options.fog_of_war,
                            args=options.args, rng=rng)
        if main is not None:
            agent.set_main_agent(main)
        return agent

    raise ConfigurationError(f"Unknown agent name {options.name!r}")
