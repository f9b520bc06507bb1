from types import SimpleNamespace

import pytest

from config import LEFT_EYE, NOSE, NOSE_TIP
from errors import InitializationError, TransientDetectionGap
from processing.face_detection import FaceDetector, snapshot_from_result

IMG_W, IMG_H = 640, 480
NUM_LANDMARKS = 478


def landmark(i):
    # Spread points over the middle of the frame
    return SimpleNamespace(x=0.25 + 0.5 * (i % 20) / 19, y=0.2 + 0.6 * (i // 20) / 23)


def landmarker_result(count=NUM_LANDMARKS, blendshapes=None):
    categories = [
        SimpleNamespace(category_name=name, score=score)
        for name, score in (blendshapes or {}).items()
    ]
    return SimpleNamespace(
        face_landmarks=[[landmark(i) for i in range(count)]] if count else [],
        face_blendshapes=[categories] if categories else [],
    )


class FakeLandmarker:
    def __init__(self, result):
        self.result = result
        self.closed = False

    def detect(self, image):
        return self.result

    def close(self):
        self.closed = True


class TestSnapshotFromResult:

    def test_no_face(self):
        assert snapshot_from_result(landmarker_result(count=0), IMG_W, IMG_H) is None

    def test_converts_to_pixel_space(self):
        snap = snapshot_from_result(landmarker_result(), IMG_W, IMG_H)

        assert snap.box.x == 160
        assert snap.box.width == 320
        assert len(snap.landmarks.left_eye) == 6
        assert len(snap.landmarks.right_eye) == 6
        assert len(snap.landmarks.nose) == len(NOSE)

        expected_corner = landmark(LEFT_EYE[0])
        assert snap.landmarks.left_eye[0].x == pytest.approx(expected_corner.x * IMG_W)
        assert snap.landmarks.left_eye[0].y == pytest.approx(expected_corner.y * IMG_H)

        tip = landmark(NOSE[NOSE_TIP])
        assert snap.landmarks.nose[NOSE_TIP].x == pytest.approx(tip.x * IMG_W)

    def test_blendshapes_become_expressions(self):
        result = landmarker_result(blendshapes={"mouthSmileLeft": 0.96, "mouthSmileRight": 0.94})
        snap = snapshot_from_result(result, IMG_W, IMG_H)
        assert snap.expressions["happy"] == pytest.approx(0.95)

    def test_missing_blendshapes(self):
        snap = snapshot_from_result(landmarker_result(), IMG_W, IMG_H)
        assert snap.expressions == {}

    def test_partial_landmarks(self):
        with pytest.raises(TransientDetectionGap):
            snapshot_from_result(landmarker_result(count=100), IMG_W, IMG_H)


class TestFaceDetector:

    def test_missing_model_asset(self, tmp_path):
        detector = FaceDetector(tmp_path / "missing.task")
        with pytest.raises(InitializationError):
            detector.initialize()
        assert not detector.ready

    def test_detect_before_initialize(self, tmp_path, frame):
        detector = FaceDetector(tmp_path / "missing.task")
        with pytest.raises(InitializationError):
            detector.detect_once(frame)

    def test_detect_once(self, tmp_path, frame):
        detector = FaceDetector(tmp_path / "model.task")
        detector._landmarker = FakeLandmarker(landmarker_result())
        snap = detector.detect_once(frame)
        assert snap is not None
        assert snap.box.width > 0

    def test_partial_landmarks_are_swallowed(self, tmp_path, frame):
        detector = FaceDetector(tmp_path / "model.task")
        detector._landmarker = FakeLandmarker(landmarker_result(count=100))
        assert detector.detect_once(frame) is None

    def test_no_face(self, tmp_path, frame):
        detector = FaceDetector(tmp_path / "model.task")
        detector._landmarker = FakeLandmarker(landmarker_result(count=0))
        assert detector.detect_once(frame) is None

    def test_close(self, tmp_path):
        detector = FaceDetector(tmp_path / "model.task")
        landmarker = FakeLandmarker(landmarker_result())
        detector._landmarker = landmarker
        detector.close()
        assert landmarker.closed
        assert not detector.ready
        detector.close()


class RaisingLandmarker(FakeLandmarker):
    def __init__(self, error):
        super().__init__(None)
        self.error = error

    def detect(self, image):
        raise self.error


@pytest.mark.parametrize("error", [RuntimeError("graph failed"), ValueError("bad image")])
def test_landmarker_failure_is_a_missed_frame(tmp_path, frame, error):
    detector = FaceDetector(tmp_path / "model.task")
    detector._landmarker = RaisingLandmarker(error)
    assert detector.detect_once(frame) is None
