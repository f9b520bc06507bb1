from enum import Enum
from dataclasses import dataclass


class ChallengeKind(str, Enum):
    EXPRESSION = "expression"
    BLINK = "blink"
    POSE = "pose"


@dataclass(frozen=True)
class Challenge:
    label: str
    key: str
    kind: ChallengeKind


DEFAULT_CHALLENGES = (
    Challenge(label="Please smile 😄", key="happy", kind=ChallengeKind.EXPRESSION),
    Challenge(label="Please blink 👁️", key="blink", kind=ChallengeKind.BLINK),
    Challenge(label="Look left 👈", key="left", kind=ChallengeKind.POSE),
    Challenge(label="Look right 👉", key="right", kind=ChallengeKind.POSE),
    Challenge(label="Look up 👆", key="up", kind=ChallengeKind.POSE),
    Challenge(label="Look down 👇", key="down", kind=ChallengeKind.POSE),
)
