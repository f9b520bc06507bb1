from pydantic import BaseModel, Field


class Point(BaseModel):
    x: float
    y: float


class Box(BaseModel):
    x: float
    y: float
    width: float
    height: float


class FaceLandmarks(BaseModel):
    left_eye: list[Point]
    right_eye: list[Point]
    nose: list[Point]


class DetectionSnapshot(BaseModel):
    """Measurements for one face on one tick, in pixel coordinates."""

    box: Box
    landmarks: FaceLandmarks | None = None
    expressions: dict[str, float] = Field(default_factory=dict)
