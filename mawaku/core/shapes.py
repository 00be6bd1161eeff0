from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_KEY_ENV_VAR = "GEMINI_API_KEY"


def _validate_path_format(v: str) -> str:
    if not v.strip():
        raise ValueError("Path cannot be empty")
    try:
        Path(v)
    except Exception as e:
        raise ValueError(f"Invalid path format: {v}") from e
    return v


PathStr = Annotated[str, AfterValidator(_validate_path_format)]


class GeminiApiConfig(BaseModel):
    api_key_env_var: str = Field(
        DEFAULT_API_KEY_ENV_VAR,
        description="Name of the environment variable holding the Gemini API key",
    )

    @field_validator("api_key_env_var")
    @classmethod
    def _default_when_blank(cls, v: str) -> str:
        v = v.strip()
        return v or DEFAULT_API_KEY_ENV_VAR


class Config(BaseModel):
    """Contents of ~/.mawaku/config.toml."""

    gemini_api: GeminiApiConfig = Field(default_factory=GeminiApiConfig)
    image_output_dir: PathStr = Field(
        ..., description="Directory where generated images are written"
    )


class PlaceDescription(BaseModel):
    """Structured summary of a location used to enrich the image prompt."""

    ambiance: str = ""
    items: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class Prediction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bytes_base64_encoded: str | None = Field(None, alias="bytesBase64Encoded")
    mime_type: str | None = Field(None, alias="mimeType")


class PredictResponse(BaseModel):
    predictions: list[Prediction] = Field(default_factory=list)


class ContentPart(BaseModel):
    text: str | None = None


class Content(BaseModel):
    parts: list[ContentPart] = Field(default_factory=list)
    role: str | None = None


class Candidate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Content = Field(default_factory=Content)
    finish_reason: str | None = Field(None, alias="finishReason")

    def first_text(self) -> str | None:
        for part in self.content.parts:
            if part.text is not None:
                return part.text
        return None


class GenerateContentResponse(BaseModel):
    candidates: list[Candidate] = Field(default_factory=list)

    def first_text(self) -> str | None:
        if not self.candidates:
            return None
        return self.candidates[0].first_text()
