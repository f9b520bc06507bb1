from typing import NamedTuple


class NoseOffset(NamedTuple):
    x: float
    y: float


def _dist(a, b):
    return ((a.x - b.x) ** 2 + (a.y - b.y) ** 2) ** 0.5


def compute_ear(eye):
    """Eye Aspect Ratio = (|p1-p5| + |p2-p4|) / (2*|p0-p3|)

    Points follow the 6-point contour order: corner, upper-outer, upper-inner,
    corner, lower-inner, lower-outer. Lower values mean a more closed eye.
    """
    p0, p1, p2, p3, p4, p5 = eye
    vertical1 = _dist(p1, p5)
    vertical2 = _dist(p2, p4)
    horizontal = _dist(p0, p3)
    if horizontal == 0:
        return 0.0
    return (vertical1 + vertical2) / (2.0 * horizontal)


def compute_nose_offset(nose, box) -> NoseOffset:
    """Nose position normalized to the face box. May fall outside [0, 1]."""
    return NoseOffset(
        x=(nose.x - box.x) / box.width,
        y=(nose.y - box.y) / box.height,
    )
