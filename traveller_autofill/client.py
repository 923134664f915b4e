"""Thin HTTP client for the traveller extraction endpoint."""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Iterator, Optional

import httpx


DEFAULT_API_URL = os.getenv("API_URL", "http://localhost:8000")
PROCESS_TRAVELLERS_PATH = "/api/process-travellers"
UPLOAD_CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[int, int], None]


def _iter_chunks(body: bytes, on_progress: Optional[ProgressCallback]) -> Iterator[bytes]:
    total = len(body)
    sent = 0
    for start in range(0, total, UPLOAD_CHUNK_SIZE):
        chunk = body[start : start + UPLOAD_CHUNK_SIZE]
        sent += len(chunk)
        yield chunk
        if on_progress:
            on_progress(sent, total)


class TravellerApiClient:
    """Upload documents to the extraction API and return its JSON answer."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client()

    def process_travellers(
        self,
        filename: str,
        content: bytes,
        media_type: str,
        on_upload_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{PROCESS_TRAVELLERS_PATH}"
        # Encode the multipart body up front so it can be streamed in chunks.
        encoded = self._http.build_request("POST", url, files={"file": (filename, content, media_type)})
        body = encoded.read()
        headers = {
            "Content-Type": encoded.headers["Content-Type"],
            "Content-Length": str(len(body)),
        }
        response = self._http.post(url, content=_iter_chunks(body, on_upload_progress), headers=headers)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self._http.close()
