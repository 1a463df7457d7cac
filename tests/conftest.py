"""Shared fixtures: a sample score report and a fake chat-completions endpoint."""

import json

import httpx
import pytest

from spatial_voice.scoring.client import ScoringClient


@pytest.fixture
def report_data() -> dict:
    return {
        "scores": {
            "verbal_content": 7.5,
            "visual_aids_slides": 8.0,
            "time_management": 6.5,
            "audience_engagement": 7.0,
            "vocal_delivery": 6.0,
            "nonverbal_body_language": 5.5,
            "overall": 8.0,
            "overall_comment": "Well Done",
        },
        "feedback": {
            "verbal_content": "Clear structure with a strong opening.",
            "visual_aids_slides": "Slides are tidy but text heavy.",
            "time_management": "Finished slightly early; pace the conclusion.",
            "audience_engagement": "Ask the audience a question midway.",
            "vocal_delivery": "Vary your pitch on key points.",
            "nonverbal_body_language": "Use open gestures more often.",
        },
    }


@pytest.fixture
def report_json(report_data) -> str:
    return json.dumps(report_data)


@pytest.fixture
def completion_body():
    """Build a chat.completion response body around some message content."""

    def _build(content: str | None) -> dict:
        return {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 1760000000,
            "model": "deepseek-chat",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                    "logprobs": None,
                }
            ],
            "usage": {"prompt_tokens": 10, "completion_tokens": 10, "total_tokens": 20},
        }

    return _build


@pytest.fixture
def make_client():
    """Build a ScoringClient whose HTTP traffic goes to `handler`."""

    def _make(handler, api_key: str | None = "test-key", **kwargs) -> ScoringClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ScoringClient(api_key=api_key, http_client=http_client, **kwargs)

    return _make


@pytest.fixture
def requests() -> list[httpx.Request]:
    """Requests seen by the fake endpoint."""
    return []


@pytest.fixture
def ok_handler(requests, report_json, completion_body):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=completion_body(report_json))

    return handler
