import logging
from contextlib import contextmanager

import cv2
import numpy as np

from config import CAMERA_INDEX
from errors import DeviceError

logger = logging.getLogger("uvicorn.error")


class CameraSource:
    """Exclusive handle on a local OpenCV camera for the length of one session."""

    def __init__(self, index: int = CAMERA_INDEX):
        self.index = index
        self._capture = None

    @property
    def acquired(self) -> bool:
        return self._capture is not None

    def acquire(self):
        if self._capture is not None:
            return self._capture
        capture = cv2.VideoCapture(self.index)
        if not capture.isOpened():
            capture.release()
            raise DeviceError(f"Camera {self.index} could not be opened (missing device or permission denied)")
        self._capture = capture
        logger.info(f"[Camera] acquired camera {self.index}")
        return capture

    def read(self) -> np.ndarray | None:
        if self._capture is None:
            return None
        ok, frame = self._capture.read()
        if not ok:
            return None
        return frame

    def release(self):
        if self._capture is None:
            return
        self._capture.release()
        self._capture = None
        logger.info(f"[Camera] released camera {self.index}")


@contextmanager
def open_camera(camera: CameraSource):
    """Acquire ``camera`` and release it however the block exits."""
    camera.acquire()
    try:
        yield camera
    finally:
        camera.release()
