# paintbiz/errors.py
from typing import Dict, Optional


class PaintBizError(Exception):
    """Base class for everything the client raises on purpose."""


class ValidationError(PaintBizError):
    """Form input failed the job schema. `fields` maps field name -> message."""

    def __init__(self, fields: Dict[str, str]):
        self.fields = dict(fields)
        detail = ", ".join(f"{k}: {v}" for k, v in self.fields.items())
        super().__init__(f"Invalid job form ({detail})")


class NetworkError(PaintBizError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(NetworkError):
    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class UploadError(PaintBizError):
    pass
