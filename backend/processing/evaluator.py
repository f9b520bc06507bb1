"""
Challenge decision rules.

Each challenge kind maps a single detection snapshot to satisfied / not
satisfied. Missing data (no snapshot, no landmarks, short landmark groups,
an empty face box) is never an error here: the camera feed drops tracking
all the time, so it simply reads as "not yet".
"""

from dataclasses import dataclass
from typing import Any

from config import (
    EXPRESSION_THRESHOLD, EAR_THRESHOLD, NOSE_TIP,
    POSE_LEFT_MAX, POSE_RIGHT_MIN, POSE_UP_MAX, POSE_DOWN_MIN,
)
from processing.metrics import compute_ear, compute_nose_offset
from schemas.detection import DetectionSnapshot
from state.challenges import Challenge, ChallengeKind

EYE_POINTS = 6

# key -> (offset axis, predicate)
POSE_RULES = {
    "left": ("x", lambda v: v < POSE_LEFT_MAX),
    "right": ("x", lambda v: v > POSE_RIGHT_MIN),
    "up": ("y", lambda v: v < POSE_UP_MAX),
    "down": ("y", lambda v: v > POSE_DOWN_MIN),
}


@dataclass(frozen=True)
class Evaluation:
    satisfied: bool
    metric: Any = None


NOT_SATISFIED = Evaluation(satisfied=False)


def _evaluate_expression(challenge: Challenge, snapshot: DetectionSnapshot) -> Evaluation:
    confidence = snapshot.expressions.get(challenge.key)
    if confidence is None or confidence < EXPRESSION_THRESHOLD:
        return NOT_SATISFIED
    return Evaluation(satisfied=True, metric=dict(snapshot.expressions))


def _usable_eye(eye) -> bool:
    if len(eye) != EYE_POINTS:
        return False
    # Collapsed corners give a meaningless EAR of 0
    return (eye[0].x, eye[0].y) != (eye[3].x, eye[3].y)


def _evaluate_blink(challenge: Challenge, snapshot: DetectionSnapshot) -> Evaluation:
    landmarks = snapshot.landmarks
    if landmarks is None or not (_usable_eye(landmarks.left_eye) and _usable_eye(landmarks.right_eye)):
        return NOT_SATISFIED
    avg_ear = (compute_ear(landmarks.left_eye) + compute_ear(landmarks.right_eye)) / 2.0
    if avg_ear < EAR_THRESHOLD:
        return Evaluation(satisfied=True, metric=avg_ear)
    return NOT_SATISFIED


def _evaluate_pose(challenge: Challenge, snapshot: DetectionSnapshot) -> Evaluation:
    rule = POSE_RULES.get(challenge.key)
    landmarks = snapshot.landmarks
    box = snapshot.box
    if rule is None or landmarks is None or len(landmarks.nose) <= NOSE_TIP:
        return NOT_SATISFIED
    if box.width <= 0 or box.height <= 0:
        return NOT_SATISFIED

    axis, predicate = rule
    offset = compute_nose_offset(landmarks.nose[NOSE_TIP], box)
    if predicate(getattr(offset, axis)):
        return Evaluation(satisfied=True)
    return NOT_SATISFIED


_EVALUATORS = {
    ChallengeKind.EXPRESSION: _evaluate_expression,
    ChallengeKind.BLINK: _evaluate_blink,
    ChallengeKind.POSE: _evaluate_pose,
}


def evaluate(challenge: Challenge, snapshot: DetectionSnapshot | None) -> Evaluation:
    """Judge one challenge against one snapshot. The metric is what gets recorded on success."""
    if snapshot is None:
        return NOT_SATISFIED
    return _EVALUATORS[challenge.kind](challenge, snapshot)


def is_satisfied(challenge: Challenge, snapshot: DetectionSnapshot | None) -> bool:
    return evaluate(challenge, snapshot).satisfied


def record_label(challenge: Challenge) -> str:
    if challenge.kind == ChallengeKind.BLINK:
        return "Blink detected 👁️"
    if challenge.kind == ChallengeKind.POSE:
        return f"Face turned {challenge.key.capitalize()}"
    return challenge.label
