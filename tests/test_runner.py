"""
Tests for the agent factory and the reference episode runner.
"""

import sys
import os
import random

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from rts_agents.agent import CancelToken, ConfigurationError
from rts_agents.actions import StrategicCommand
from rts_agents.channel import QueueChannel, LocalPolicyServer
from rts_agents.factory import make_agent
from rts_agents.mixing import MixingAgent
from rts_agents.options import AgentOptions
from rts_agents.rule_agents import SimpleAgent, HitAndRunAgent
from rts_agents.runner import EpisodeRunner
from rts_agents.trained import TrainedAgent

from tests.fakes import FakeEnv, RecordingAgent, ScriptedChannel


class TestFactory:
    def test_rule_agents(self):
        assert isinstance(make_agent(AgentOptions('ai_simple')), SimpleAgent)
        assert isinstance(make_agent(AgentOptions('AI_HIT_AND_RUN')), HitAndRunAgent)

    def test_trained_agent(self):
        agent = make_agent(AgentOptions('ai_trained', frames_in_state=5,
                                        fog_of_war=False),
                           channel=ScriptedChannel())
        assert isinstance(agent, TrainedAgent)
        assert agent.history.capacity == 5
        assert agent.extractor.fog_of_war is False

    def test_trained_agent_needs_channel(self):
        with pytest.raises(ConfigurationError):
            make_agent(AgentOptions('ai_trained'))

    def test_mixed_agent(self):
        main = RecordingAgent("main")
        agent = make_agent(AgentOptions('ai_mixed', args="start/20|decay/0.9|backup/ai_simple"),
                           main=main, rng=random.Random(0))
        assert isinstance(agent, MixingAgent)
        assert agent.main is main
        assert agent.latest_start == 20

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError):
            make_agent(AgentOptions('ai_lua'))


class TestEpisodeRunner:
    def test_binds_slots(self):
        env = FakeEnv()
        agents = [RecordingAgent("p0"), RecordingAgent("p1")]
        EpisodeRunner(env, agents).bind()
        assert [a.id for a in agents] == [0, 1]
        assert all(a.state is env.state for a in agents)

    def test_one_act_per_slot_per_tick_then_game_end(self):
        log = []
        env = FakeEnv(max_ticks=3)
        agents = [RecordingAgent("p0", log), RecordingAgent("p1", log)]
        result = EpisodeRunner(env, agents).run_episode()

        assert result.ticks == 3
        assert log == [
            ('p0', 'act', 0), ('p1', 'act', 0),
            ('p0', 'act', 1), ('p1', 'act', 1),
            ('p0', 'act', 2), ('p1', 'act', 2),
            ('p0', 'game_end', 2), ('p1', 'game_end', 2),
        ]
        assert result.results == {0: True, 1: True}

    def test_abstentions_not_applied(self):
        env = FakeEnv(max_ticks=2)
        agents = [RecordingAgent("p0"), RecordingAgent("p1", act_result=False)]
        result = EpisodeRunner(env, agents).run_episode()
        assert result.actions_applied == {0: 2, 1: 0}
        assert result.abstentions == {0: 0, 1: 2}
        assert all(set(applied) == {0} for applied in env.applied)

    def test_max_ticks(self):
        env = FakeEnv(max_ticks=100)
        result = EpisodeRunner(env, [RecordingAgent("p0")]).run_episode(max_ticks=4)
        assert result.ticks == 4

    def test_cancelled_episode_still_ends_once(self):
        log = []
        token = CancelToken()
        token.cancel()
        env = FakeEnv(max_ticks=5)
        result = EpisodeRunner(env, [RecordingAgent("p0", log)]).run_episode(cancel=token)
        assert result.cancelled
        assert result.ticks == 0
        assert log == [('p0', 'game_end', 0)]

    def test_several_episodes_reuse_binding(self):
        env = FakeEnv(max_ticks=2)
        agents = [RecordingAgent("p0"), RecordingAgent("p1")]
        runner = EpisodeRunner(env, agents)
        runner.run_episode()
        runner.run_episode()
        assert runner.episodes_played == 2
        assert env.resets == 2
        assert agents[0].set_id_calls == 1
        assert agents[0].episodes_finished == 2

    def test_curriculum_game(self):
        """Mixed trained agent against a rule agent over several episodes."""
        channel = QueueChannel()
        server = LocalPolicyServer(
            channel, lambda payload: {'a': int(StrategicCommand.ATTACK)},
            poll_interval=0.01,
        )
        server.start()
        try:
            trained = make_agent(AgentOptions('ai_trained', frames_in_state=2),
                                 channel=channel)
            mixed = make_agent(
                AgentOptions('ai_mixed', args="start/4|decay/0.5|backup/ai_simple"),
                main=trained, rng=random.Random(5),
            )
            opponent = make_agent(AgentOptions('ai_hit_and_run'))
            env = FakeEnv(max_ticks=6)
            runner = EpisodeRunner(env, [mixed, opponent])

            bounds = []
            for _ in range(3):
                result = runner.run_episode()
                assert result.ticks == 6
                assert result.results[0] is True
                bounds.append(mixed.latest_start)
        finally:
            server.stop()

        assert bounds == [2.0, 1.0, 0.5]
        assert trained.id == 0 and mixed.backup.id == 0
        assert len(trained.history) == 2
