"""OpenAI client helpers."""

import json
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI
from pydantic import ValidationError

from .config import get_settings
from .models import DocumentContent
from .schemas import MAX_TRAVELLERS, TRAVELLER_RESPONSE_SCHEMA, ExtractionResult


logger = logging.getLogger(__name__)

SCHEMA_NAME = "traveller_information"

SYSTEM_PROMPT = f"""
You are an AI assistant that extracts traveller information from text or images.
Extract information for up to {MAX_TRAVELLERS} travellers, in the order they appear.

Rules:
- If gender is not explicitly mentioned, make an educated guess based on the name.
  Use "male", "female" or "other".
- Always use full four-digit years for dates of birth and write them as YYYYMMDD.
- Write nationality as an English adjective such as "Swedish" or "Norwegian";
  use "Unknown" when it cannot be determined.
- Write disability as "None", "Mobility impairment", "Visual impairment" or
  "Hearing impairment" when the document says so, otherwise null.
- Look for any information that applies to all passengers (for example one
  nationality for the whole group) and put it in globalInfo.
""".strip()

_client: Optional[OpenAI] = None


class ModelResponseError(RuntimeError):
    """Raised when the model returns no usable structured output."""


class ModelRefusalError(ModelResponseError):
    """Raised when the model refuses to answer."""

    def __init__(self, refusal: str):
        super().__init__(refusal)
        self.refusal = refusal


def get_client() -> OpenAI:
    """Provide a singleton OpenAI client."""

    global _client
    if _client is None:
        settings = get_settings()
        _client = OpenAI(api_key=settings.openai_api_key)
    return _client


def build_messages(content: DocumentContent) -> List[Dict[str, Any]]:
    if content.is_image:
        user_content: Any = [
            {"type": "input_text", "text": "Extract traveller information from this image:"},
            {"type": "input_image", "image_url": content.data_url},
        ]
    else:
        user_content = f"Extract traveller information from this content:\n\n{content.text or ''}"
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


def _output_text(response: Any) -> Optional[str]:
    chunks: List[str] = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for part in item.content or []:
            if part.type == "refusal":
                raise ModelRefusalError(part.refusal)
            if part.type == "output_text":
                chunks.append(part.text)
    text = "".join(chunks).strip()
    return text or None


def request_traveller_extraction(content: DocumentContent, model: Optional[str] = None) -> Dict[str, Any]:
    """Ask the model for structured traveller data and validate the answer."""

    settings = get_settings()
    client = get_client()
    response = client.responses.create(
        model=model or settings.openai_model,
        input=build_messages(content),
        text={
            "format": {
                "type": "json_schema",
                "name": SCHEMA_NAME,
                "schema": TRAVELLER_RESPONSE_SCHEMA,
                "strict": True,
            }
        },
    )
    logger.info("OpenAI API response received")

    raw = _output_text(response)
    if raw is None:
        raise ModelResponseError("OpenAI response content is null")
    logger.debug("Raw response: %s", raw)

    try:
        data = json.loads(raw)
        ExtractionResult.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ModelResponseError(f"OpenAI response does not match the traveller schema: {exc}") from exc
    return data
