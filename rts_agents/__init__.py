"""
RTS Agents - Decision-making layer for a MicroRTS-style simulation.

Every player slot is driven by an Agent:
- Rule agents: scripted heuristics (SimpleAgent, HitAndRunAgent)
- TrainedAgent: feature history round-tripped through an inference channel
- MixingAgent: curriculum that lets a rule agent open the game before the
  main agent takes over, with a shrinking opening across episodes
"""

from rts_agents.agent import Agent, CancelToken, ConfigurationError
from rts_agents.actions import Action, UnitCommand, CommandType, StrategicCommand
from rts_agents.state import GameState, UnitView, UnitType
from rts_agents.rule_agents import RuleAgent, SimpleAgent, HitAndRunAgent, RULE_AGENTS
from rts_agents.history import HistoryBuffer
from rts_agents.features import FeatureExtractor, FEATURE_DIM
from rts_agents.channel import InferenceChannel, InferencePayload, QueueChannel, LocalPolicyServer
from rts_agents.trained import TrainedAgent
from rts_agents.options import AgentOptions, CurriculumConfig, parse_curriculum_args
from rts_agents.mixing import MixingAgent
from rts_agents.factory import make_agent
from rts_agents.runner import EpisodeRunner, EpisodeResult

__all__ = [
    "Agent", "CancelToken", "ConfigurationError",
    "Action", "UnitCommand", "CommandType", "StrategicCommand",
    "GameState", "UnitView", "UnitType",
    "RuleAgent", "SimpleAgent", "HitAndRunAgent", "RULE_AGENTS",
    "HistoryBuffer",
    "FeatureExtractor", "FEATURE_DIM",
    "InferenceChannel", "InferencePayload", "QueueChannel", "LocalPolicyServer",
    "TrainedAgent",
    "AgentOptions", "CurriculumConfig", "parse_curriculum_args",
    "MixingAgent",
    "make_agent",
    "EpisodeRunner", "EpisodeResult",
]
