import logging
from typing import Callable

from processing.evaluator import evaluate, record_label
from schemas.detection import DetectionSnapshot
from state.session import SessionState, SessionStep

logger = logging.getLogger("uvicorn.error")


def tick(
    session: SessionState,
    snapshot: DetectionSnapshot | None,
    now: float,
    capture: Callable[[], str | None] | None = None,
) -> SessionState:
    """Apply one sampling tick to the session.

    Re-arming, timeout, evaluation, capture, recording and advancement all
    happen here, so a tick is either a full step or a no-op. ``capture`` is
    called at most once per satisfied challenge.
    """
    if session.is_terminal:
        return session

    if session.challenge_started_at is None:
        session.challenge_started_at = now

    if not session.capture_armed and session.rearm_at is not None and now >= session.rearm_at:
        session.capture_armed = True
        session.rearm_at = None
        logger.info(f"[Sequencer] challenge #{session.current_index} armed: {session.prompt}")

    if session.timeout_s > 0 and now - session.challenge_started_at >= session.timeout_s:
        session.step = SessionStep.TIMED_OUT
        session.capture_armed = False
        session.rearm_at = None
        logger.info(f"[Sequencer] challenge #{session.current_index} timed out after {session.timeout_s:.1f}s")
        return session

    if not session.capture_armed or snapshot is None:
        return session

    challenge = session.current_challenge
    evaluation = evaluate(challenge, snapshot)
    if not evaluation.satisfied:
        return session

    artifact = _run_capture(capture)
    session.capture_armed = False
    session.recorder.record(
        record_label(challenge), evaluation.metric,
        challenge_key=challenge.key, capture=artifact,
    )
    logger.info(f"[Sequencer] challenge #{session.current_index} '{challenge.key}' satisfied, metric={evaluation.metric}")

    _advance(session, now)
    return session


def _advance(session: SessionState, now: float):
    session.current_index += 1
    if session.current_index >= len(session.challenges):
        session.step = SessionStep.COMPLETE
        session.rearm_at = None
        logger.info(f"[Sequencer] all {len(session.challenges)} challenges complete")
        return

    # The prompt switches now; capture waits out the cool-down
    session.rearm_at = now + session.rearm_delay_s
    session.challenge_started_at = now


def _run_capture(capture: Callable[[], str | None] | None) -> str | None:
    # Runs before any state change; a failing sink only costs the artifact
    if capture is None:
        return None
    try:
        return capture()
    except (RuntimeError, ValueError, OSError) as e:
        logger.warning(f"[Sequencer] capture failed, recording without artifact: {type(e).__name__}: {e}")
        return None
