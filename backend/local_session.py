"""
Run a challenge session against the local webcam.

Usage:
  1. Put face_landmarker.task under weights/ (or set LANDMARKER_PATH)
  2. Run: python3 local_session.py
  3. Follow the prompts printed in the terminal. Ctrl+C stops the session;
     whatever was recorded so far is still printed.
"""

import asyncio

from config import CAMERA_INDEX
from errors import DeviceError, InitializationError
from processing.camera import CameraSource
from processing.face_detection import FaceDetector
from processing.scheduler import run_camera_session
from state.session import SessionState


async def run(session: SessionState, camera_index: int = CAMERA_INDEX) -> SessionState:
    last_prompt = None

    async def show(result: dict):
        nonlocal last_prompt
        if result["prompt"] != last_prompt:
            last_prompt = result["prompt"]
            print(f">>> {last_prompt}")

    print(f">>> {session.prompt}")
    last_prompt = session.prompt
    try:
        await run_camera_session(CameraSource(camera_index), FaceDetector(), session, on_update=show)
    except asyncio.CancelledError:
        print("Session cancelled")
    return session


def print_results(session: SessionState):
    print(f"\nCaptured results ({session.step.value}):")
    for record, capture in zip(session.recorder.results, session.recorder.captures):
        line = f"  {record.prompt}"
        if isinstance(record.metric, dict):
            line += " " + ", ".join(f"{k}={v:.2f}" for k, v in record.metric.items())
        elif record.metric is not None:
            line += f" (EAR: {record.metric:.3f})"
        if capture:
            line += f" [{len(capture)} byte capture]"
        print(line)


def main():
    session = SessionState()
    try:
        asyncio.run(run(session))
    except (InitializationError, DeviceError) as e:
        print(f"Could not start session: {e}")
        raise SystemExit(1)
    except KeyboardInterrupt:
        print("Interrupted")
    print_results(session)


if __name__ == "__main__":
    main()
