"""Application configuration helpers."""

from dataclasses import dataclass
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


@dataclass
class Settings:
    """Holds runtime configuration loaded from the environment."""

    openai_api_key: str
    openai_model: str = "gpt-4o-2024-08-06"
    upload_dir: Optional[str] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings so every module shares the same values."""

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ValueError(
            "Please set OPENAI_API_KEY in the environment (e.g., via a .env file)."
        )

    return Settings(
        openai_api_key=api_key,
        openai_model=os.getenv("OPENAI_MODEL") or Settings.openai_model,
        upload_dir=os.getenv("UPLOAD_DIR") or None,
    )
