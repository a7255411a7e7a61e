# paintbiz/gallery.py
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from .api import BusinessApi, images_key
from .config import DEFAULT_MAX_UPLOAD_BYTES
from .errors import PaintBizError, UploadError
from .models import JobImage

logger = logging.getLogger("paintbiz.gallery")


@dataclass(frozen=True)
class ImageFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(path.name, path.read_bytes(), content_type or "application/octet-stream")


class JobImageUploader:
    """
    Photo uploads, one file at a time per job.

    Each job has its own uploading flag and file selection. The flag is set
    before the request goes out and cleared when it settles, so a second
    trigger for the same job while a request is in flight does nothing.
    Uploads to different jobs are independent.
    """

    def __init__(self, api: BusinessApi, max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES):
        self.api = api
        self.max_upload_bytes = max_upload_bytes
        self._uploading: Set[int] = set()
        self._selected: Dict[int, ImageFile] = {}

    def is_uploading(self, job_id: int) -> bool:
        return job_id in self._uploading

    def select(self, job_id: int, file: ImageFile) -> None:
        self._selected[job_id] = file

    def selected_file(self, job_id: int) -> Optional[ImageFile]:
        return self._selected.get(job_id)

    async def list_images(self, job_id: int) -> List[JobImage]:
        return await self.api.list_images(job_id)

    async def upload(self, job_id: int, file: Optional[ImageFile] = None) -> Optional[JobImage]:
        if job_id in self._uploading:
            return None
        file = file or self._selected.get(job_id)
        if file is None:
            return None

        self._uploading.add(job_id)
        try:
            self._check(file)
            image = await self.api.upload_job_image(job_id, file.filename, file.content, file.content_type)
            logger.info(f"Uploaded {file.filename} to job {job_id} as image {image.id}")
            await self._refresh_gallery(job_id)
            return image
        except UploadError as e:
            logger.error(f"Upload error: {e}")
            return None
        finally:
            self._uploading.discard(job_id)
            self._selected.pop(job_id, None)

    def _check(self, file: ImageFile) -> None:
        if not file.content_type.startswith("image/"):
            raise UploadError(f"{file.filename} is not an image ({file.content_type})")
        if not file.content:
            raise UploadError(f"{file.filename} is empty")
        if len(file.content) > self.max_upload_bytes:
            raise UploadError(
                f"{file.filename} is {len(file.content)} bytes; limit is {self.max_upload_bytes}"
            )

    async def _refresh_gallery(self, job_id: int) -> None:
        try:
            await self.api.invalidate(images_key(job_id))
        except PaintBizError as e:
            logger.warning(f"Gallery refresh for job {job_id} failed after upload: {e}")
