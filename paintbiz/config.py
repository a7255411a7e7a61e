# paintbiz/config.py
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

# ──────────────────────────────────────────────────────────────────────────────
# Settings come from env so the same code runs against local dev and prod:
#   PAINTBIZ_API_URL=https://paintbiz.example.com
#   PAINTBIZ_DATA_DIR=~/.paintbiz
# ──────────────────────────────────────────────────────────────────────────────
DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_MAX_UPLOAD_BYTES = 16 * 1024 * 1024  # 16MB


class Settings(BaseModel):
    api_url: str = Field(DEFAULT_API_URL, min_length=1)
    timeout: float = Field(10.0, gt=0)
    data_dir: Path = Path("~/.paintbiz")
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, gt=0)
    log_level: str = "INFO"

    @property
    def categories_path(self) -> Path:
        return self.data_dir.expanduser() / "storage.json"


def get_settings() -> Settings:
    raw = {
        "api_url": os.environ.get("PAINTBIZ_API_URL"),
        "timeout": os.environ.get("PAINTBIZ_TIMEOUT"),
        "data_dir": os.environ.get("PAINTBIZ_DATA_DIR"),
        "max_upload_bytes": os.environ.get("PAINTBIZ_MAX_UPLOAD_BYTES"),
        "log_level": os.environ.get("PAINTBIZ_LOG_LEVEL"),
    }
    try:
        # unset vars fall back to the model defaults
        return Settings(**{k: v for k, v in raw.items() if v not in (None, "")})
    except ValidationError as e:
        raise RuntimeError(f"Invalid PaintBiz settings: {e}") from e
