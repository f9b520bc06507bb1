from typing import Any

from pydantic import BaseModel


class BBox(BaseModel):
    x: int
    y: int
    width: int
    height: int


class ChallengeInfo(BaseModel):
    index: int
    total: int
    key: str | None = None
    kind: str | None = None
    capture_armed: bool


class ResultRecordModel(BaseModel):
    prompt: str
    challenge_key: str
    metric: dict[str, float] | float | None = None


class FrameResponse(BaseModel):
    type: str = "frame_result"
    step: str
    prompt: str
    face_detected: bool
    bbox: BBox | None = None
    challenge: ChallengeInfo
    results: list[ResultRecordModel] = []


class SessionView(BaseModel):
    """Read-only view for display: current prompt plus everything recorded so far."""

    type: str = "session_result"
    step: str
    prompt: str
    results: list[ResultRecordModel]
    captures: list[str | None]


class ErrorResponse(BaseModel):
    type: str = "error"
    message: str
    fatal: bool = False


def results_payload(session) -> list[ResultRecordModel]:
    return [
        ResultRecordModel(prompt=r.prompt, challenge_key=r.challenge_key, metric=r.metric)
        for r in session.recorder.results
    ]


def session_view(session) -> dict[str, Any]:
    return SessionView(
        step=session.step.value,
        prompt=session.prompt,
        results=results_payload(session),
        captures=list(session.recorder.captures),
    ).model_dump()
