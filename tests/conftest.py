import json

import pytest

from domain.rubrics import EvaluatorConfig


class FakeTransport:
    """Plays back a scripted sequence of responses / exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def gemini_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def model_payload(cv_score=4, project_score=3, **extra) -> dict:
    payload = {
        "cv": {
            name: {"score": cv_score, "reason": "ok"}
            for name in ("technicalSkills", "experienceLevel", "relevantAchievements", "culturalFit")
        },
        "project": {
            name: {"score": project_score, "reason": "ok"}
            for name in ("correctness", "codeQuality", "resilience", "documentation", "creativity")
        },
        "cvFeedback": "Solid backend background.",
        "projectFeedback": "Working pipeline with retries.",
        "overallSummary": "Promising candidate.",
    }
    payload.update(extra)
    return payload


@pytest.fixture
def config():
    return EvaluatorConfig(model_name="gemini-test", api_key="test-key")


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay):
        sleeps.append(delay)
    return _sleep


@pytest.fixture
def payload_json():
    return json.dumps(model_payload())
