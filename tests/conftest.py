import numpy as np
import pytest

from schemas.detection import Box, DetectionSnapshot, FaceLandmarks, Point

FACE_BOX = Box(x=100, y=100, width=200, height=200)


def eye_points(half_height, width=30.0, origin=(0.0, 0.0), scale=1.0):
    """Six eye points whose EAR is 2 * half_height / width."""
    ox, oy = origin
    raw = [
        (0.0, 0.0),
        (width / 3, -half_height),
        (2 * width / 3, -half_height),
        (width, 0.0),
        (2 * width / 3, half_height),
        (width / 3, half_height),
    ]
    return [Point(x=ox + x * scale, y=oy + y * scale) for x, y in raw]


def nose_points(offset_x=0.5, offset_y=0.5, box=FACE_BOX):
    tip = Point(x=box.x + offset_x * box.width, y=box.y + offset_y * box.height)
    bridge = [Point(x=tip.x, y=tip.y - d) for d in (30, 20, 10)]
    nostrils = [Point(x=tip.x + d, y=tip.y + 5) for d in (-10, -5, 0, 5, 10)]
    return bridge + [tip] + nostrils


def snapshot(expressions=None, eye_half_height=6.0, offset_x=0.5, offset_y=0.5, landmarks=True):
    """A neutral, eyes-open, facing-forward face unless told otherwise."""
    face_landmarks = None
    if landmarks:
        face_landmarks = FaceLandmarks(
            left_eye=eye_points(eye_half_height, origin=(220, 160)),
            right_eye=eye_points(eye_half_height, origin=(150, 160)),
            nose=nose_points(offset_x, offset_y),
        )
    return DetectionSnapshot(
        box=FACE_BOX,
        landmarks=face_landmarks,
        expressions=expressions if expressions is not None else {"neutral": 0.97, "happy": 0.02},
    )


SATISFYING = {
    "happy": lambda: snapshot(expressions={"happy": 0.96, "neutral": 0.03}),
    "blink": lambda: snapshot(eye_half_height=1.5),
    "left": lambda: snapshot(offset_x=0.3),
    "right": lambda: snapshot(offset_x=0.7),
    "up": lambda: snapshot(offset_y=0.3),
    "down": lambda: snapshot(offset_y=0.7),
}


class ScriptedDetector:
    """Stands in for FaceDetector: hands out snapshots in order, then None."""

    def __init__(self, snapshots=()):
        self.snapshots = list(snapshots)
        self.calls = 0
        self.initialized = False
        self.closed = False

    def initialize(self):
        self.initialized = True

    def detect_once(self, frame_bgr):
        self.calls += 1
        if not self.snapshots:
            return None
        return self.snapshots.pop(0)

    def close(self):
        self.closed = True


@pytest.fixture
def frame():
    img = np.zeros((48, 64, 3), dtype=np.uint8)
    img[10:30, 20:40] = (0, 128, 255)
    return img


@pytest.fixture
def satisfying():
    return SATISFYING
