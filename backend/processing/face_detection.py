import logging
from pathlib import Path

import cv2
import numpy as np
import mediapipe as mp

from config import LANDMARKER_PATH, LEFT_EYE, RIGHT_EYE, NOSE
from errors import InitializationError, TransientDetectionGap
from processing.expressions import expressions_from_blendshapes
from schemas.detection import Box, DetectionSnapshot, FaceLandmarks, Point

logger = logging.getLogger("uvicorn.error")


def create_landmarker(model_path: Path = LANDMARKER_PATH):
    """Create a new MediaPipe FaceLandmarker in IMAGE mode (thread-safe, per-session)."""
    BaseOptions = mp.tasks.BaseOptions
    FaceLandmarker = mp.tasks.vision.FaceLandmarker
    FaceLandmarkerOptions = mp.tasks.vision.FaceLandmarkerOptions
    VisionRunningMode = mp.tasks.vision.RunningMode

    options = FaceLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=str(model_path)),
        running_mode=VisionRunningMode.IMAGE,
        num_faces=1,
        min_face_detection_confidence=0.5,
        min_face_presence_confidence=0.5,
        output_face_blendshapes=True,
    )
    return FaceLandmarker.create_from_options(options)


def _points(landmarks, indices, img_w, img_h) -> list[Point]:
    try:
        return [Point(x=landmarks[i].x * img_w, y=landmarks[i].y * img_h) for i in indices]
    except IndexError as e:
        raise TransientDetectionGap(f"landmark set too short ({len(landmarks)} points)") from e


def snapshot_from_result(result, img_w: int, img_h: int) -> DetectionSnapshot | None:
    """Convert a FaceLandmarker result into a pixel-space snapshot, or None when no face."""
    if not result.face_landmarks:
        return None

    landmarks = result.face_landmarks[0]

    xs = [lm.x for lm in landmarks]
    ys = [lm.y for lm in landmarks]
    x_min = max(0, int(min(xs) * img_w))
    y_min = max(0, int(min(ys) * img_h))
    x_max = min(img_w, int(max(xs) * img_w))
    y_max = min(img_h, int(max(ys) * img_h))
    box = Box(x=x_min, y=y_min, width=x_max - x_min, height=y_max - y_min)

    face_landmarks = FaceLandmarks(
        left_eye=_points(landmarks, LEFT_EYE, img_w, img_h),
        right_eye=_points(landmarks, RIGHT_EYE, img_w, img_h),
        nose=_points(landmarks, NOSE, img_w, img_h),
    )

    blendshapes = {}
    if result.face_blendshapes:
        blendshapes = {b.category_name: b.score for b in result.face_blendshapes[0]}

    return DetectionSnapshot(
        box=box,
        landmarks=face_landmarks,
        expressions=expressions_from_blendshapes(blendshapes),
    )


def detect_face(landmarker, frame_rgb: np.ndarray) -> DetectionSnapshot | None:
    """Run face detection on an RGB frame. Returns a snapshot or None."""
    mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
    result = landmarker.detect(mp_image)
    img_h, img_w = frame_rgb.shape[:2]
    return snapshot_from_result(result, img_w, img_h)


class FaceDetector:
    """Per-session detector adapter around a MediaPipe FaceLandmarker."""

    def __init__(self, model_path: Path = LANDMARKER_PATH):
        self.model_path = Path(model_path)
        self._landmarker = None

    @property
    def ready(self) -> bool:
        return self._landmarker is not None

    def initialize(self):
        if self._landmarker is not None:
            return
        if not self.model_path.is_file():
            raise InitializationError(f"Face landmarker model not found at {self.model_path}")
        try:
            self._landmarker = create_landmarker(self.model_path)
        except (RuntimeError, ValueError) as e:
            raise InitializationError(f"Could not load face landmarker from {self.model_path}: {e}") from e

    def detect_once(self, frame_bgr: np.ndarray) -> DetectionSnapshot | None:
        if self._landmarker is None:
            raise InitializationError("FaceDetector.initialize() must be called before detect_once()")
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        try:
            return detect_face(self._landmarker, frame_rgb)
        except TransientDetectionGap as e:
            logger.debug(f"[Detector] skipping frame: {e}")
            return None
        except (RuntimeError, ValueError) as e:
            logger.warning(f"[Detector] landmarker failed on frame, skipping: {e}")
            return None

    def close(self):
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
