from enum import Enum
from dataclasses import dataclass, field
from typing import Any

from config import REARM_DELAY_MS, CHALLENGE_TIMEOUT_S, COMPLETION_MESSAGE, TIMEOUT_MESSAGE
from state.challenges import Challenge, DEFAULT_CHALLENGES


class SessionStep(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETE = "COMPLETE"
    TIMED_OUT = "TIMED_OUT"


@dataclass(frozen=True)
class ResultRecord:
    prompt: str
    challenge_key: str
    metric: Any = None  # expression map, averaged EAR, or None for pose


class SessionRecorder:
    """Append-only log of satisfied challenges and their captured frames.

    Results and captures are always appended together, so index i of one
    belongs to index i of the other.
    """

    def __init__(self):
        self._results: list[ResultRecord] = []
        self._captures: list[str | None] = []

    @property
    def results(self) -> tuple[ResultRecord, ...]:
        return tuple(self._results)

    @property
    def captures(self) -> tuple[str | None, ...]:
        return tuple(self._captures)

    def __len__(self):
        return len(self._results)

    def record(self, prompt: str, metric: Any = None, *, challenge_key: str, capture: str | None = None):
        self._results.append(ResultRecord(prompt=prompt, challenge_key=challenge_key, metric=metric))
        self._captures.append(capture)

    def clear(self):
        self._results.clear()
        self._captures.clear()


@dataclass
class SessionState:
    challenges: tuple[Challenge, ...] = DEFAULT_CHALLENGES
    step: SessionStep = SessionStep.ACTIVE
    current_index: int = 0

    # Capture gate
    capture_armed: bool = True
    rearm_at: float | None = None
    rearm_delay_s: float = field(default_factory=lambda: REARM_DELAY_MS / 1000.0)

    # Per-challenge deadline, 0 disables it
    challenge_started_at: float | None = None
    timeout_s: float = field(default_factory=lambda: CHALLENGE_TIMEOUT_S)

    recorder: SessionRecorder = field(default_factory=SessionRecorder)

    def __post_init__(self):
        self.challenges = tuple(self.challenges)
        if not self.challenges:
            self.step = SessionStep.COMPLETE

    @property
    def current_challenge(self) -> Challenge | None:
        if self.step != SessionStep.ACTIVE or self.current_index >= len(self.challenges):
            return None
        return self.challenges[self.current_index]

    @property
    def is_terminal(self) -> bool:
        return self.step != SessionStep.ACTIVE

    @property
    def prompt(self) -> str:
        if self.step == SessionStep.COMPLETE:
            return COMPLETION_MESSAGE
        if self.step == SessionStep.TIMED_OUT:
            return TIMEOUT_MESSAGE
        return self.challenges[self.current_index].label

    def reset(self):
        self.step = SessionStep.ACTIVE if self.challenges else SessionStep.COMPLETE
        self.current_index = 0
        self.capture_armed = True
        self.rearm_at = None
        self.challenge_started_at = None
        self.recorder.clear()
