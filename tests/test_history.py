"""
Tests for the HistoryBuffer window and the feature extractor.
"""

import sys
import os
import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from rts_agents.history import HistoryBuffer
from rts_agents.features import FeatureExtractor, FEATURE_DIM, FEATURE_NAMES
from rts_agents.state import UnitType

from tests.fakes import FakeGameState, starting_state, unit


def frame(value: float, dim: int = 4) -> np.ndarray:
    return np.full(dim, value, dtype=np.float32)


class TestHistoryBuffer:
    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            HistoryBuffer(0)

    def test_empty(self):
        buf = HistoryBuffer(3)
        assert len(buf) == 0
        assert buf.window() == []

    def test_window_is_last_pushes_oldest_first(self):
        for capacity in (1, 2, 3, 5):
            for n in range(0, 12):
                buf = HistoryBuffer(capacity)
                for i in range(n):
                    buf.push(frame(i))
                window = buf.window()
                expected = list(range(n))[-capacity:] if n else []
                assert len(window) == min(n, capacity)
                assert [int(f[0]) for f in window] == expected

    def test_window_returns_copies(self):
        buf = HistoryBuffer(2)
        buf.push(frame(1))
        window = buf.window()
        window[0][:] = 99
        assert buf.window()[0][0] == 1

    def test_evicts_oldest_when_full(self):
        buf = HistoryBuffer(2)
        for i in range(5):
            buf.push(frame(i))
        assert len(buf) == 2
        assert [int(f[0]) for f in buf.window()] == [3, 4]


class TestFeatureExtractor:
    def test_shape_and_dtype(self):
        features = FeatureExtractor().extract(starting_state(), 0)
        assert features.shape == (FEATURE_DIM,)
        assert features.dtype == np.float32
        assert len(FEATURE_NAMES) == FEATURE_DIM

    def test_features_normalized(self):
        features = FeatureExtractor(fog_of_war=False).extract(starting_state(), 0)
        assert np.all(features >= 0.0)
        assert np.all(features <= 1.0)

    def test_deterministic(self):
        state = starting_state()
        extractor = FeatureExtractor()
        np.testing.assert_array_equal(extractor.extract(state, 0),
                                      extractor.extract(state, 0))

    def test_fog_hides_distant_enemies(self):
        state = starting_state()
        idx = FEATURE_NAMES.index('enemy_base')

        fogged = FeatureExtractor(fog_of_war=True).extract(state, 0)
        clear = FeatureExtractor(fog_of_war=False).extract(state, 0)

        assert fogged[idx] == 0.0
        assert clear[idx] == pytest.approx(0.1)

    def test_fog_shows_nearby_enemies(self):
        state = starting_state()
        state.unit_list.append(unit(10, UnitType.LIGHT, 1, 3, 1, hp=4))
        idx = FEATURE_NAMES.index('enemy_light')
        fogged = FeatureExtractor(fog_of_war=True).extract(state, 0)
        assert fogged[idx] == pytest.approx(0.1)

    def test_fog_masks_enemy_resources(self):
        state = starting_state()
        state.bank[1] = 10
        idx = FEATURE_NAMES.index('enemy_resources')
        assert FeatureExtractor(fog_of_war=True).extract(state, 0)[idx] == 0.0
        assert FeatureExtractor(fog_of_war=False).extract(state, 0)[idx] == pytest.approx(0.5)

    def test_enemy_resources_for_higher_slot_ids(self):
        state = FakeGameState(bank={2: 0, 3: 6, 4: 4}, unit_list=[
            unit(0, UnitType.BASE, 2, 1, 1, hp=10),
            unit(1, UnitType.BASE, 3, 6, 6, hp=10),
            unit(2, UnitType.BASE, 4, 6, 1, hp=10),
            unit(3, UnitType.RESOURCE, -1, 0, 0),
        ])
        idx = FEATURE_NAMES.index('enemy_resources')
        features = FeatureExtractor(fog_of_war=False).extract(state, 2)
        assert features[idx] == pytest.approx(0.5)

    def test_game_phase(self):
        state = FakeGameState(tick=50, max_ticks=100)
        idx = FEATURE_NAMES.index('game_phase')
        assert FeatureExtractor().extract(state, 0)[idx] == pytest.approx(0.5)

    def test_empty_map_defaults(self):
        features = FeatureExtractor().extract(FakeGameState(), 0)
        assert features[FEATURE_NAMES.index('my_cx')] == 0.0
        assert features[FEATURE_NAMES.index('enemy_cx')] == 1.0
