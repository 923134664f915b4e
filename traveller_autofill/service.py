"""Extraction pipeline: uploaded document in, structured travellers out."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional

from .extractors import ACCEPTED_UPLOADS, extract_content
from .llm import request_traveller_extraction


logger = logging.getLogger(__name__)


def guess_media_type(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix in ACCEPTED_UPLOADS:
        return ACCEPTED_UPLOADS[suffix]
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "text/plain"


def extract_travellers(path: Path, media_type: Optional[str]) -> Dict[str, Any]:
    """Read a document and return the model's traveller data for it."""

    content = extract_content(Path(path), media_type)
    logger.info("Content read successfully (%s)", content.kind)
    result = request_traveller_extraction(content)
    logger.info("Extracted %s traveller(s)", len(result.get("travellers", [])))
    return result
