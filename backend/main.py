import asyncio
import json
import logging
from contextlib import asynccontextmanager

import cv2
import numpy as np
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from config import FRONTEND_URL, TICK_INTERVAL_MS
from errors import InitializationError
from models.loader import load_all_models
from processing.face_detection import FaceDetector
from processing.scheduler import TickScheduler
from schemas.messages import ErrorResponse, session_view
from state.session import SessionState

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    print("Checking models...")
    app.state.registry = load_all_models()
    print("Models ready. Server ready.")
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    registry = app.state.registry
    return {"status": "ok", "landmarker": registry.landmarker_path.name}


@app.websocket("/ws/verify/challenge")
async def challenge_verification(websocket: WebSocket):
    await websocket.accept()
    registry = websocket.app.state.registry
    session = SessionState()
    detector = FaceDetector(registry.landmarker_path)
    latest_frame_bytes: bytes | None = None
    reset_requested = asyncio.Event()

    try:
        detector.initialize()
    except InitializationError as e:
        logger.error(f"WS challenge session could not start: {e}")
        await websocket.send_json(ErrorResponse(message=str(e), fatal=True).model_dump())
        await websocket.close()
        return

    logger.info("WS challenge session started")

    async def reader():
        """Continuously read from WebSocket, keeping only the latest binary frame."""
        nonlocal latest_frame_bytes
        try:
            while True:
                message = await websocket.receive()

                if message.get("type") == "websocket.disconnect":
                    break

                if message.get("text"):
                    try:
                        data = json.loads(message["text"])
                        if data.get("type") == "reset":
                            logger.info("WS reset command received")
                            reset_requested.set()
                    except json.JSONDecodeError:
                        pass

                if message.get("bytes"):
                    # Always overwrite, only the latest frame matters
                    latest_frame_bytes = message["bytes"]

        except (WebSocketDisconnect, RuntimeError):
            pass

    async def next_frame():
        nonlocal latest_frame_bytes
        if latest_frame_bytes is None:
            return None

        # Grab and clear the latest frame
        jpeg_bytes = latest_frame_bytes
        latest_frame_bytes = None

        frame = cv2.imdecode(
            np.frombuffer(jpeg_bytes, np.uint8),
            cv2.IMREAD_COLOR,
        )
        if frame is None:
            await websocket.send_json(ErrorResponse(message="Could not decode frame").model_dump())
        return frame

    async def processor():
        """Tick the session on the latest frame until it ends, then wait for a reset."""
        nonlocal latest_frame_bytes
        scheduler = TickScheduler(
            detector, session,
            interval_s=TICK_INTERVAL_MS / 1000.0,
            on_update=websocket.send_json,
        )
        try:
            while True:
                await scheduler.run(next_frame, reset_requested)

                if not reset_requested.is_set():
                    logger.info(f"WS session finished: step={session.step.value}, results={len(session.recorder)}")
                    await websocket.send_json(session_view(session))
                    await reset_requested.wait()

                reset_requested.clear()
                session.reset()
                latest_frame_bytes = None
                await websocket.send_json({"type": "reset_ack", "step": session.step.value, "prompt": session.prompt})

        except (WebSocketDisconnect, RuntimeError):
            pass
        except asyncio.CancelledError:
            pass

    try:
        # Run reader and processor concurrently
        reader_task = asyncio.create_task(reader())
        processor_task = asyncio.create_task(processor())

        # When reader finishes (disconnect), cancel processor
        await reader_task
        processor_task.cancel()
        try:
            await processor_task
        except asyncio.CancelledError:
            pass

    except (WebSocketDisconnect, RuntimeError) as e:
        logger.info(f"WS session ended: {type(e).__name__}: {e}")
    finally:
        logger.info(f"WS cleanup: {len(session.recorder)}/{len(session.challenges)} challenges recorded, closing detector")
        detector.close()
