"""Upload Coordinator: one batch at a time, with synthetic progress.

The server gives no transfer progress, so a ticker advances the gauge by a
fixed step until it reaches a cap below 100; the real answer moves it to
100 (success) or back to 0 (failure).
"""

import asyncio
import contextlib
import logging
from typing import Callable, Optional, Sequence

from .errors import MediaLibraryError, UploadError, UploadInProgressError, ValidationError
from .file_registry import FileRegistry
from .gateway import MediaGateway
from .models import MediaFile, UploadBlob, normalize_folder_id

logger = logging.getLogger(__name__)

TICK_INTERVAL = 0.2  # seconds
TICK_STEP = 10
TICK_CAP = 90
DEFAULT_UPLOAD_TIMEOUT = 120.0

ProgressCallback = Callable[[int], None]


class UploadCoordinator:
    """Send upload batches and commit their records into the registry.

    At most one batch is outstanding. The batch is all-or-nothing: on any
    failure the registry is left untouched and a single UploadError is
    raised.
    """

    def __init__(
        self,
        api: MediaGateway,
        registry: FileRegistry,
        on_progress: Optional[ProgressCallback] = None,
        timeout: float = DEFAULT_UPLOAD_TIMEOUT,
        tick_interval: float = TICK_INTERVAL,
    ):
        self.api = api
        self.registry = registry
        self.on_progress = on_progress
        self.timeout = timeout
        self.tick_interval = tick_interval
        self._progress = 0
        self._uploading = False

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def is_uploading(self) -> bool:
        return self._uploading

    async def upload(self, blobs: Sequence[UploadBlob], folder_id: Optional[str] = None) -> list[MediaFile]:
        """Upload *blobs* into *folder_id* (``None`` or "root" for top level)."""
        if self._uploading:
            raise UploadInProgressError()
        if not blobs:
            raise ValidationError("No files selected for upload")

        self._uploading = True
        try:
            self._set_progress(0)
            try:
                files = await self._transfer(blobs, normalize_folder_id(folder_id))
            except MediaLibraryError as exc:
                self._set_progress(0)
                if isinstance(exc, UploadError):
                    raise
                raise UploadError(exc.message, status_code=exc.status_code, error_code=exc.error_code) from exc

            self._set_progress(100)
            self.registry.commit(files)
            logger.info("Uploaded %d file(s)", len(files))
            return files
        finally:
            self._uploading = False

    def acknowledge(self) -> None:
        """Reset the gauge after the host has shown the finished upload."""
        if not self._uploading:
            self._set_progress(0)

    async def _transfer(self, blobs: Sequence[UploadBlob], folder_id: Optional[str]) -> list[MediaFile]:
        ticker = asyncio.create_task(self._tick())
        try:
            return await asyncio.wait_for(self.api.upload(blobs, folder_id), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise UploadError(f"Upload timed out after {self.timeout:g} seconds") from exc
        finally:
            ticker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticker

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self._set_progress(min(self._progress + TICK_STEP, TICK_CAP))

    def _set_progress(self, value: int) -> None:
        if value == self._progress:
            return
        self._progress = value
        if self.on_progress is not None:
            self.on_progress(value)
