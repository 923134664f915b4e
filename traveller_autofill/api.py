"""FastAPI application exposing the traveller extraction endpoint."""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .extractors import ExtractionError
from .llm import ModelRefusalError, ModelResponseError
from .service import extract_travellers


logger = logging.getLogger(__name__)

PROCESS_TRAVELLERS_PATH = "/api/process-travellers"

app = FastAPI(title="Traveller Autofill", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8501",
        "http://127.0.0.1:8501",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as a flat ``{message, error}`` body."""

    if isinstance(exc.detail, dict):
        body = exc.detail
    elif exc.status_code == 405:
        body = {"message": "Method not allowed"}
    elif exc.status_code == 400:
        # Raised by the framework while parsing the multipart body.
        body = {"message": "Error processing file", "error": str(exc.detail)}
    else:
        body = {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


def _error(status_code: int, message: str, exc: Exception, **extra: Any) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"message": message, "error": str(exc), **extra})


def _spool_upload(upload: UploadFile, upload_dir: Optional[str]) -> Path:
    suffix = Path(upload.filename or "").suffix
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix, dir=upload_dir) as tmp:
        path = Path(tmp.name)
        try:
            shutil.copyfileobj(upload.file, tmp)
        except BaseException:
            tmp.close()
            path.unlink(missing_ok=True)
            raise
    return path


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


def _single_upload(form: FormData) -> UploadFile:
    values = form.getlist("file")
    if not values:
        raise HTTPException(status_code=400, detail={"message": "No file uploaded"})
    uploads = [v for v in values if isinstance(v, UploadFile)]
    if not uploads:
        raise HTTPException(
            status_code=400,
            detail={"message": "No file uploaded", "error": "Field 'file' must be an uploaded file."},
        )
    if len(values) > 1:
        raise HTTPException(
            status_code=400,
            detail={"message": "Only one file can be uploaded", "error": f"Received {len(values)} values for 'file'."},
        )
    return uploads[0]


@app.post(PROCESS_TRAVELLERS_PATH)
async def process_travellers(request: Request) -> Dict[str, Any]:
    try:
        form = await request.form()
    except StarletteHTTPException:
        raise
    except Exception as exc:  # noqa: BLE001 - multipart parser errors
        raise _error(400, "Error processing file", exc) from exc

    try:
        upload = _single_upload(form)
        return await run_in_threadpool(_process_upload, upload)
    finally:
        await form.close()


def _process_upload(file: UploadFile) -> Dict[str, Any]:
    logger.info("File received: %s (%s)", file.filename, file.content_type)
    tmp_path: Optional[Path] = None
    try:
        settings = get_settings()
        tmp_path = _spool_upload(file, settings.upload_dir)
        return extract_travellers(tmp_path, file.content_type)
    except ExtractionError as exc:
        logger.warning("Could not read %s: %s", file.filename, exc)
        raise _error(500, "Error reading file content", exc) from exc
    except ModelRefusalError as exc:
        logger.warning("Model refused %s: %s", file.filename, exc.refusal)
        raise _error(500, "The AI model refused the request", exc, refusal=exc.refusal) from exc
    except ModelResponseError as exc:
        logger.warning("Invalid model output for %s: %s", file.filename, exc)
        raise _error(500, "Invalid response from AI model", exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error processing travellers")
        raise _error(500, "Error processing travellers", exc) from exc
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
