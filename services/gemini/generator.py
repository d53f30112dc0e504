"""Description: Text generation over the Gemini API, behind a one-method interface."""

import logging
from typing import Any, List, Optional, Protocol, Sequence, Union

from google import genai
from google.genai import types

from models.image_record import ImagePayload
from services.errors import GenerationError
from utils.config import get_gemini_model

LOGGER = logging.getLogger(__name__)

PromptPart = Union[str, ImagePayload]


class TextGenerator(Protocol):
    """Anything that turns prompt parts into generated text.

    Implementations raise `GenerationError` carrying the provider's raw message.
    """

    async def generate(self, parts: Sequence[PromptPart]) -> str:
        ...


def build_contents(parts: Sequence[PromptPart]) -> List[Any]:
    """Convert prompt parts into `generate_content` contents, inlining images."""
    contents: List[Any] = []
    for part in parts:
        if isinstance(part, ImagePayload):
            contents.append(types.Part.from_bytes(data=part.data, mime_type=part.mime_type))
        else:
            contents.append(part)
    return contents


def block_reason(response: Any) -> Optional[str]:
    """Return why Gemini withheld text, from prompt feedback or the first candidate."""
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None)
    if reason is None:
        candidates = getattr(response, "candidates", None) or []
        finish = getattr(candidates[0], "finish_reason", None) if candidates else None
        if finish is not None and getattr(finish, "value", finish) != "STOP":
            reason = finish
    if reason is None:
        return None
    return str(getattr(reason, "value", reason))


class GeminiGenerator:
    """`TextGenerator` backed by the async Gemini client."""

    def __init__(self, client: genai.Client, model: Optional[str] = None) -> None:
        if client is None:
            raise ValueError("Gemini client must be provided.")
        self.client = client
        self.model = model or get_gemini_model()

    @classmethod
    def from_api_key(cls, api_key: str, model: Optional[str] = None) -> "GeminiGenerator":
        return cls(genai.Client(api_key=api_key), model=model)

    async def generate(self, parts: Sequence[PromptPart]) -> str:
        contents = build_contents(parts)
        try:
            response = await self.client.aio.models.generate_content(model=self.model, contents=contents)
        except Exception as exc:
            LOGGER.error("Error during Gemini generate_content call: %s", exc)
            raise GenerationError(str(exc)) from exc
        text = getattr(response, "text", None)
        if not text:
            reason = block_reason(response)
            LOGGER.error("Gemini returned no text (reason: %s)", reason)
            raise GenerationError(f"Response blocked: {reason}" if reason else "Empty response from Gemini")
        return text
