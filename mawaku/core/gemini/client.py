"""Blocking client for the Gemini REST API.

Processing flow:
    1. Reject blank API keys before touching the network.
    2. POST a JSON body to ``/v1beta/models/{model}:{method}`` with the key in
       the ``x-goog-api-key`` header.
    3. Raise on transport failures or non-2xx statuses.
    4. Parse the JSON body into pydantic response models.

Error handling:
    - Blank key -> ``MissingApiKeyError``
    - Network failure or non-2xx status -> ``GeminiHttpError``
    - Malformed JSON, unexpected shape, or no text to parse -> ``GeminiJsonError``

Requests are never retried.
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from mawaku.core.prompt import place_description_prompt
from mawaku.core.shapes import GenerateContentResponse, PlaceDescription, PredictResponse

logger = logging.getLogger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com"
API_VERSION = "v1beta"
IMAGE_MODEL = "imagen-4.0-generate-001"
TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_SAMPLE_COUNT = 2
DEFAULT_ASPECT_RATIO = "16:9"
DEFAULT_TIMEOUT_S = 120.0
API_KEY_HEADER = "x-goog-api-key"

PLACE_DESCRIPTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "ambiance": {"type": "STRING"},
        "items": {"type": "ARRAY", "items": {"type": "STRING"}},
        "keywords": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
    "required": ["ambiance", "items", "keywords"],
    "propertyOrdering": ["ambiance", "items", "keywords"],
}

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class GeminiError(Exception):
    """Base class for Gemini API failures."""


class MissingApiKeyError(GeminiError):
    """Raised when the API key is empty or whitespace."""

    def __init__(self):
        super().__init__("Gemini API key is missing")


class GeminiHttpError(GeminiError):
    """Raised when the request fails in transport or returns a non-2xx status."""


class GeminiJsonError(GeminiError):
    """Raised when a response body or generated text cannot be parsed."""


def endpoint_url(model: str, method: str, base_url: str = BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{API_VERSION}/models/{model}:{method}"


def predict_request(prompt: str, sample_count: int = DEFAULT_SAMPLE_COUNT) -> dict[str, Any]:
    return {
        "instances": [{"prompt": prompt}],
        "parameters": {
            "sampleCount": sample_count,
            "aspectRatio": DEFAULT_ASPECT_RATIO,
        },
    }


def generate_content_request(
    prompt: str, response_schema: dict[str, Any] | None = None
) -> dict[str, Any]:
    body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
    if response_schema is not None:
        body["generationConfig"] = {
            "responseMimeType": "application/json",
            "responseSchema": response_schema,
        }
    return body


def _require_api_key(api_key: str | None) -> str:
    if api_key is None or not api_key.strip():
        raise MissingApiKeyError()
    return api_key.strip()


class GeminiClient:
    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_url: str = BASE_URL,
        image_model: str = IMAGE_MODEL,
        text_model: str = TEXT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_S,
    ):
        self.http_client = http_client
        self.base_url = base_url
        self.image_model = image_model
        self.text_model = text_model
        self.timeout = timeout

    def _post(
        self,
        api_key: str,
        model: str,
        method: str,
        body: dict[str, Any],
        response_model: type[ResponseT],
    ) -> ResponseT:
        url = endpoint_url(model, method, self.base_url)
        headers = {API_KEY_HEADER: api_key}
        logger.debug(f"POST {url}")

        try:
            if self.http_client is not None:
                response = self.http_client.post(
                    url, json=body, headers=headers, timeout=self.timeout
                )
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(url, json=body, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GeminiHttpError(
                f"Gemini request failed with status {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise GeminiHttpError(f"Gemini request to {url} failed: {e}") from e

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise GeminiJsonError(f"Unexpected response from {url}: {e}") from e

    def generate_image(self, api_key: str, prompt: str) -> PredictResponse:
        """Request images for prompt from the Imagen predict endpoint."""
        key = _require_api_key(api_key)
        return self._post(
            key, self.image_model, "predict", predict_request(prompt), PredictResponse
        )

    def generate_text(self, api_key: str, prompt: str) -> GenerateContentResponse:
        key = _require_api_key(api_key)
        return self._post(
            key,
            self.text_model,
            "generateContent",
            generate_content_request(prompt),
            GenerateContentResponse,
        )

    def generate_place_description(self, location: str, api_key: str) -> PlaceDescription:
        """Ask the text model for a schema-constrained description of location."""
        key = _require_api_key(api_key)
        response = self._post(
            key,
            self.text_model,
            "generateContent",
            generate_content_request(
                place_description_prompt(location), PLACE_DESCRIPTION_SCHEMA
            ),
            GenerateContentResponse,
        )

        text = response.first_text()
        if text is None:
            raise GeminiJsonError("Place description response contained no text")

        try:
            return PlaceDescription.model_validate_json(text)
        except ValidationError as e:
            raise GeminiJsonError(f"Failed to parse place description: {e}") from e


_default_client = GeminiClient()


def generate_image(api_key: str, prompt: str) -> PredictResponse:
    return _default_client.generate_image(api_key, prompt)


def generate_text(api_key: str, prompt: str) -> GenerateContentResponse:
    return _default_client.generate_text(api_key, prompt)


def generate_place_description(location: str, api_key: str) -> PlaceDescription:
    return _default_client.generate_place_description(location, api_key)
