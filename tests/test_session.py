import dataclasses

import pytest

from state.challenges import DEFAULT_CHALLENGES, ChallengeKind
from state.session import ResultRecord, SessionRecorder, SessionState, SessionStep


class TestSessionRecorder:

    def test_results_and_captures_stay_aligned(self):
        recorder = SessionRecorder()
        recorder.record("Please smile", {"happy": 0.95}, challenge_key="happy", capture="img-0")
        recorder.record("Blink detected", 0.12, challenge_key="blink")
        recorder.record("Face turned Left", challenge_key="left", capture="img-2")

        assert len(recorder) == 3
        assert [r.challenge_key for r in recorder.results] == ["happy", "blink", "left"]
        assert recorder.captures == ("img-0", None, "img-2")

    def test_exposed_sequences_are_read_only(self):
        recorder = SessionRecorder()
        recorder.record("Please smile", challenge_key="happy")
        results = recorder.results
        assert isinstance(results, tuple)
        recorder.record("Blink detected", challenge_key="blink")
        assert len(results) == 1
        assert len(recorder.results) == 2

    def test_records_are_immutable(self):
        record = ResultRecord(prompt="Face turned Up", challenge_key="up")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.prompt = "changed"


class TestSessionState:

    def test_defaults(self):
        session = SessionState()
        assert session.step == SessionStep.ACTIVE
        assert session.current_index == 0
        assert session.capture_armed is True
        assert session.current_challenge == DEFAULT_CHALLENGES[0]
        assert session.prompt == "Please smile 😄"
        assert not session.is_terminal

    def test_default_challenge_order(self):
        assert [c.key for c in DEFAULT_CHALLENGES] == ["happy", "blink", "left", "right", "up", "down"]
        assert [c.kind for c in DEFAULT_CHALLENGES[:2]] == [ChallengeKind.EXPRESSION, ChallengeKind.BLINK]

    def test_challenges_are_frozen_per_session(self):
        challenges = list(DEFAULT_CHALLENGES[:2])
        session = SessionState(challenges=challenges)
        challenges.append(DEFAULT_CHALLENGES[2])
        assert len(session.challenges) == 2
