import base64
import logging

import cv2
import numpy as np

logger = logging.getLogger("uvicorn.error")


def encode_capture(frame_bgr: np.ndarray) -> str | None:
    """Encode a frame as a PNG data URL. Returns None if the frame cannot be encoded."""
    try:
        ok, buf = cv2.imencode(".png", frame_bgr)
    except cv2.error as e:
        logger.warning(f"[Capture] PNG encoding raised: {e}")
        return None
    if not ok:
        logger.warning("[Capture] PNG encoding failed, storing empty capture")
        return None
    return "data:image/png;base64," + base64.b64encode(buf.tobytes()).decode("ascii")
