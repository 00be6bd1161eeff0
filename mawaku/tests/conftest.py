import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from mawaku.core.environment import MappingEnvironment
from mawaku.core.gemini.client import GeminiClient

HELLO_BASE64 = "aGVsbG8="


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    home: Path = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def env(home_dir: Path) -> MappingEnvironment:
    """Environment with an isolated HOME and no API key."""
    return MappingEnvironment({"HOME": str(home_dir)})


@pytest.fixture
def config_path(home_dir: Path) -> Path:
    return home_dir / ".mawaku" / "config.toml"


class RecordingTransport:
    """httpx transport that records requests and replies from a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []
        self.handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def bodies(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]


def place_description_payload(description: dict[str, Any]) -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": json.dumps(description)}], "role": "model"},
                "finishReason": "STOP",
            }
        ]
    }


def predict_payload(*predictions: dict[str, Any]) -> dict[str, Any]:
    return {"predictions": list(predictions)}


@pytest.fixture
def make_gemini_client() -> Callable[..., tuple[GeminiClient, RecordingTransport]]:
    """Build a GeminiClient whose HTTP traffic is served by a handler."""

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> tuple[GeminiClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        http_client = httpx.Client(transport=httpx.MockTransport(transport))
        return GeminiClient(http_client=http_client), transport

    return factory


@pytest.fixture
def gemini_routes() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Handler answering generateContent and predict calls with canned payloads."""

    def factory(
        description: dict[str, Any] | None = None,
        predictions: list[dict[str, Any]] | None = None,
        text_status: int = 200,
        image_status: int = 200,
    ) -> Callable[[httpx.Request], httpx.Response]:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith(":generateContent"):
                payload = place_description_payload(
                    description
                    or {"ambiance": "Misty", "items": ["torii"], "keywords": ["onsen"]}
                )
                return httpx.Response(text_status, json=payload)
            if request.url.path.endswith(":predict"):
                payload = predict_payload(
                    *(
                        predictions
                        if predictions is not None
                        else [{"bytesBase64Encoded": HELLO_BASE64, "mimeType": "image/png"}]
                    )
                )
                return httpx.Response(image_status, json=payload)
            return httpx.Response(404, json={"error": "not found"})

        return handler

    return factory
