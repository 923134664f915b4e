"""Turn uploaded documents into text or an image payload for the model."""

from __future__ import annotations

import base64
import csv
import io
import json
import logging
from pathlib import Path
from typing import Callable, Dict, List

import pandas as pd
from docx import Document
from PIL import Image
from pypdf import PdfReader

from .models import DocumentContent
from .utils import media_type_essence


logger = logging.getLogger(__name__)

CSV_TYPE = "text/csv"
PDF_TYPE = "application/pdf"
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_TYPE = "application/vnd.ms-excel"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_TYPE = "application/msword"
TEXT_TYPES = {"", "text/plain"}
IMAGE_MAX_WIDTH = 1024
IMAGE_JPEG_QUALITY = 80

# Media types the uploader offers, keyed by file extension.
ACCEPTED_UPLOADS: Dict[str, str] = {
    ".txt": "text/plain",
    ".csv": CSV_TYPE,
    ".xlsx": XLSX_TYPE,
    ".xls": XLS_TYPE,
    ".doc": DOC_TYPE,
    ".docx": DOCX_TYPE,
    ".pdf": PDF_TYPE,
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


class ExtractionError(RuntimeError):
    """Raised when a document cannot be read by its parser."""


def encode_image(path: Path, max_width: int = IMAGE_MAX_WIDTH, quality: int = IMAGE_JPEG_QUALITY) -> str:
    """Downscale an image, re-encode it as JPEG and return it as a data URL."""

    with Image.open(path) as img:
        img.load()
        if img.width > max_width:
            height = max(1, round(img.height * max_width / img.width))
            img = img.resize((max_width, height), Image.Resampling.LANCZOS)
        if img.mode != "RGB":
            img = img.convert("RGB")
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


def read_csv_rows(path: Path) -> str:
    """One JSON object per CSV row, keyed by the header line."""

    with path.open(newline="", encoding="utf-8-sig", errors="replace") as handle:
        rows = [json.dumps(row, ensure_ascii=False) for row in csv.DictReader(handle)]
    return "\n".join(rows)


def read_spreadsheet(path: Path) -> str:
    """Rows of the first sheet as a JSON array; empty cells are left out."""

    frame = pd.read_excel(path, sheet_name=0)
    records: List[Dict[str, object]] = []
    for row in frame.to_dict(orient="records"):
        record = {str(k): v for k, v in row.items() if not pd.isna(v)}
        if record:
            records.append(record)
    return json.dumps(records, ensure_ascii=False, default=str)


def read_pdf(path: Path) -> str:
    reader = PdfReader(str(path))
    return "\n".join((page.extract_text() or "") for page in reader.pages).strip()


def read_word(path: Path) -> str:
    doc = Document(str(path))
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


TEXT_EXTRACTORS: Dict[str, Callable[[Path], str]] = {
    CSV_TYPE: read_csv_rows,
    XLSX_TYPE: read_spreadsheet,
    XLS_TYPE: read_spreadsheet,
    PDF_TYPE: read_pdf,
    DOCX_TYPE: read_word,
    DOC_TYPE: read_word,
}


def extract_content(path: Path, media_type: str | None) -> DocumentContent:
    """Read an uploaded file according to its declared media type.

    Types without a dedicated reader are read as plain text instead of being
    rejected; binary formats outside the table may therefore come out garbled.
    """

    essence = media_type_essence(media_type)
    path = Path(path)
    try:
        if essence.startswith("image/"):
            data_url = encode_image(path, IMAGE_MAX_WIDTH, IMAGE_JPEG_QUALITY)
            return DocumentContent(kind="image", data_url=data_url, media_type=essence)

        reader = TEXT_EXTRACTORS.get(essence, read_text)
        if reader is read_text and essence not in TEXT_TYPES:
            logger.warning("No reader for media type %r, reading as UTF-8 text", essence)
        text = reader(path)
    except Exception as exc:  # noqa: BLE001 - parser libraries raise their own types
        raise ExtractionError(f"Could not read {essence or 'file'} content: {exc}") from exc

    logger.info("Extracted %s character(s) from %s", len(text), essence or "text")
    return DocumentContent(kind="text", text=text, media_type=essence)
