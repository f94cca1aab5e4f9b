"""
Trained Agent - Acts by querying an external policy with recent history.

Every tick:
1. compute_state(): feature vector of the current GameState (fog-masked)
2. extract(): push it into the HistoryBuffer, package the window
3. send the payload over the inference channel and wait for the reply,
   polling the cancel token between short receive() timeouts
4. handle_response(): map the reply to a StrategicCommand

Each payload carries a request id. Replies tagged with a different id
answer an abandoned (cancelled) request and are dropped.

The round trip in step 3 is the only place an agent may block. The
HistoryBuffer is intentionally kept across episodes; the first frames of
a new episode are sent alongside the tail of the previous one.
"""

import logging
import math
from typing import Optional

import numpy as np

from rts_agents.agent import Agent, CancelToken
from rts_agents.actions import Action, StrategicCommand, NUM_STRATEGIC_COMMANDS
from rts_agents.channel import InferenceChannel, InferencePayload, Response
from rts_agents.features import FeatureExtractor
from rts_agents.history import HistoryBuffer

logger = logging.getLogger(__name__)


class TrainedAgent(Agent):
    def __init__(self, channel: InferenceChannel, name: str = "",
                 fog_of_war: bool = True, frames_in_state: int = 1,
                 poll_interval: float = 0.01):
        super().__init__(name=name, fog_of_war=fog_of_war)
        self.channel = channel
        self.frames_in_state = frames_in_state
        self.poll_interval = poll_interval

        self.extractor = FeatureExtractor(fog_of_war=fog_of_war)
        self.history = HistoryBuffer(frames_in_state)

        self.responses_rejected = 0
        self.round_trips_cancelled = 0
        self.stale_replies_dropped = 0
        self._next_request_id = 0

    def compute_state(self) -> np.ndarray:
        return self.extractor.extract(self.state, self.id)

    def extract(self, tick: int) -> InferencePayload:
        self.history.push(self.compute_state())
        return InferencePayload(
            agent_id=self.id,
            tick=tick,
            frames_in_state=self.frames_in_state,
            frames=self.history.window(),
            request_id=self._take_request_id(),
        )

    def handle_response(self, response: Optional[Response],
                        action: Action) -> bool:
        """
        Resolve `response` to one StrategicCommand and write it to `action`.

        Accepts {"a": index} or {"pi": probabilities}; "a" wins if both are
        present. Anything else leaves `action` untouched and returns False.
        """
        command = self._resolve(response)
        if command is None:
            self.responses_rejected += 1
            logger.debug(f"{self.name}: rejected response {response!r}")
            return False
        action.strategic = command
        return True

    def on_act(self, tick: int, action: Action, cancel: CancelToken) -> bool:
        payload = self.extract(tick)

        self.channel.drain()
        self.channel.send(payload)

        while True:
            if cancel.is_cancelled:
                self.round_trips_cancelled += 1
                return False
            response = self.channel.receive(self.poll_interval)
            if response is None:
                continue
            if self._answers(response, payload):
                break
            self.stale_replies_dropped += 1
            logger.debug(f"{self.name}: dropped reply to an earlier request on tick {tick}")

        return self.handle_response(response, action)

    def _take_request_id(self) -> int:
        request_id = self._next_request_id
        self._next_request_id += 1
        return request_id

    @staticmethod
    def _answers(response: Response, payload: InferencePayload) -> bool:
        """Untagged replies are trusted; tagged ones must carry this request's id."""
        if 'request_id' not in response:
            return True
        return response['request_id'] == payload.request_id

    def on_game_end(self, tick: int) -> bool:
        if self.responses_rejected or self.round_trips_cancelled:
            logger.info(
                f"{self.name}: {self.responses_rejected} rejected responses, "
                f"{self.round_trips_cancelled} cancelled round trips this episode"
            )
        self.responses_rejected = 0
        self.round_trips_cancelled = 0
        return True

    @staticmethod
    def _resolve(response: Optional[Response]) -> Optional[StrategicCommand]:
        if not response:
            return None

        if 'a' in response:
            index = response['a']
            if isinstance(index, np.ndarray):
                if index.size != 1:
                    return None
                index = index.item()
            if isinstance(index, (bool, np.bool_)):
                return None
            if isinstance(index, (float, np.floating)):
                if not math.isfinite(index) or index != int(index):
                    return None
            try:
                index = int(index)
            except (TypeError, ValueError):
                return None
            if 0 <= index < NUM_STRATEGIC_COMMANDS:
                return StrategicCommand(index)
            return None

        if 'pi' in response:
            try:
                pi = np.asarray(response['pi'], dtype=np.float64).reshape(-1)
            except (TypeError, ValueError):
                return None
            if pi.size != NUM_STRATEGIC_COMMANDS or not np.all(np.isfinite(pi)):
                return None
            return StrategicCommand(int(np.argmax(pi)))

        return None
