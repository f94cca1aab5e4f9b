"""
Inference Channel - How a trained agent reaches its policy.

The agent side only needs two calls:
- send(payload): hand off the current temporal context
- receive(timeout): wait up to `timeout` seconds for the reply, or None

How payloads travel (shared memory, sockets, a batching server) belongs to
the channel implementation. QueueChannel + LocalPolicyServer provide an
in-process implementation: the server thread pulls payloads, runs a policy
callable and pushes back the reply, tagged with the payload's `request_id`.
Agents drop tagged replies that answer an earlier request.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np

from rts_agents.features import FEATURE_DIM

logger = logging.getLogger(__name__)

Response = Mapping[str, Any]
PolicyFn = Callable[['InferencePayload'], Response]


@dataclass
class InferencePayload:
    """Outgoing request: the agent's recent feature history."""
    agent_id: Optional[int]
    tick: int
    frames_in_state: int
    frames: List[np.ndarray] = field(default_factory=list)
    request_id: int = 0

    def stacked(self) -> np.ndarray:
        """(frames_in_state, FEATURE_DIM) array, zero-padded at the oldest end."""
        out = np.zeros((self.frames_in_state, FEATURE_DIM), dtype=np.float32)
        frames = self.frames[-self.frames_in_state:]
        offset = self.frames_in_state - len(frames)
        for i, frame in enumerate(frames):
            out[offset + i] = frame
        return out


class InferenceChannel:
    """Interface between a TrainedAgent and an external policy."""

    def send(self, payload: InferencePayload):
        raise NotImplementedError

    def receive(self, timeout: float) -> Optional[Response]:
        raise NotImplementedError

    def drain(self):
        """Drop requests and replies left over from an abandoned round trip."""


class QueueChannel(InferenceChannel):
    """In-process channel built on a request queue and a reply queue."""

    def __init__(self):
        self.requests: "queue.Queue[InferencePayload]" = queue.Queue()
        self.replies: "queue.Queue[Response]" = queue.Queue()

    def send(self, payload: InferencePayload):
        self.requests.put(payload)

    def receive(self, timeout: float) -> Optional[Response]:
        try:
            return self.replies.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        for q in (self.requests, self.replies):
            while True:
                try:
                    q.get_nowait()
                except queue.Empty:
                    break


class LocalPolicyServer:
    """
    Serves a QueueChannel from a daemon thread.

    Usage:
        channel = QueueChannel()
        server = LocalPolicyServer(channel, policy_fn)
        server.start()
        ...
        server.stop()
    """

    def __init__(self, channel: QueueChannel, policy: PolicyFn,
                 poll_interval: float = 0.05):
        self.channel = channel
        self.policy = policy
        self.poll_interval = poll_interval
        self.requests_served = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()
        logger.info("Local policy server started")

    def stop(self, timeout: float = 1.0):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info(f"Local policy server stopped after {self.requests_served} requests")

    def _serve(self):
        while not self._stop.is_set():
            try:
                payload = self.channel.requests.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            try:
                reply: Dict[str, Any] = dict(self.policy(payload))
            except Exception as e:
                logger.error(f"Policy failed on tick {payload.tick}: {e}")
                reply = {}
            reply['request_id'] = payload.request_id
            self.channel.replies.put(reply)
            self.requests_served += 1
