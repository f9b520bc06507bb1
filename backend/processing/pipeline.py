import time
import logging

import numpy as np

from errors import TransientDetectionGap
from processing.capture import encode_capture
from processing.sequencer import tick
from schemas.messages import BBox, ChallengeInfo, FrameResponse, results_payload
from state.session import SessionState

logger = logging.getLogger("uvicorn.error")


def process_frame(frame_bgr: np.ndarray, detector, session: SessionState, now: float | None = None) -> dict:
    """Detect on one frame and apply the result as a sampling tick. Returns a JSON-serializable dict."""
    if now is None:
        now = time.monotonic()

    snapshot = None
    if not session.is_terminal:
        t0 = time.perf_counter()
        try:
            snapshot = detector.detect_once(frame_bgr)
        except (TransientDetectionGap, RuntimeError, ValueError) as e:
            # A failed detection is a missed tick, the session stays as it was
            logger.warning(f"[Pipeline] detection failed, skipping tick: {type(e).__name__}: {e}")
        t1 = time.perf_counter()
        logger.debug(f"[Pipeline] face_detect: {(t1-t0)*1000:.0f}ms, challenge={session.current_index}")

    tick(session, snapshot, now, capture=lambda: encode_capture(frame_bgr))

    bbox = None
    if snapshot is not None:
        b = snapshot.box
        bbox = BBox(x=int(b.x), y=int(b.y), width=int(b.width), height=int(b.height))

    challenge = session.current_challenge
    return FrameResponse(
        step=session.step.value,
        prompt=session.prompt,
        face_detected=snapshot is not None,
        bbox=bbox,
        challenge=ChallengeInfo(
            index=session.current_index,
            total=len(session.challenges),
            key=challenge.key if challenge else None,
            kind=challenge.kind.value if challenge else None,
            capture_armed=session.capture_armed,
        ),
        results=results_payload(session),
    ).model_dump()
