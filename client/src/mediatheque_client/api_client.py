"""HTTP client for the Médiathèque REST API."""

import logging
import os
from typing import Any, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from .errors import MediaLibraryError, NetworkError, NotFoundError, UploadError, ValidationError
from .models import (
    ErrorBody,
    FileList,
    FileType,
    Folder,
    FolderDeleteResult,
    FolderList,
    MediaFile,
    MediaStats,
    UploadBlob,
    normalize_folder_id,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Distinguishes "leave parent unchanged" from "move to root" (None).
_UNSET: Any = object()


class MediaAPIClient:
    """Async client wrapping the media endpoints of the admin API.

    Configuration via environment variables:
        MEDIATHEQUE_API_URL        Backend base URL (default: http://localhost:8000)
        MEDIATHEQUE_API_TOKEN      Optional Bearer token
        MEDIATHEQUE_API_TIMEOUT    Request timeout in seconds (default: 30)
        MEDIATHEQUE_UPLOAD_TIMEOUT Upload timeout in seconds (default: 120)

    Failed requests are never retried. Errors are mapped onto the
    ``mediatheque_client.errors`` taxonomy: 404 -> NotFoundError,
    400/422 -> ValidationError, anything else -> NetworkError, and every
    failure of ``upload`` -> UploadError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        upload_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or os.environ.get("MEDIATHEQUE_API_URL", "http://localhost:8000")
        self.token = token if token is not None else os.environ.get("MEDIATHEQUE_API_TOKEN", "")
        self.timeout = timeout if timeout is not None else float(os.environ.get("MEDIATHEQUE_API_TIMEOUT", "30"))
        self.upload_timeout = (
            upload_timeout if upload_timeout is not None
            else float(os.environ.get("MEDIATHEQUE_UPLOAD_TIMEOUT", "120"))
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers: dict[str, str] = {}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            resp = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Request %s %s timed out", method, path)
            raise NetworkError(f"The server did not answer in time ({method} {path})") from exc
        except httpx.HTTPError as exc:
            logger.warning("Request %s %s failed: %s", method, path, exc)
            raise NetworkError(f"Could not reach the media server: {exc}") from exc

        logger.debug("%s %s -> %d", method, path, resp.status_code)
        if resp.is_success:
            return resp
        raise self._error_for(resp)

    @staticmethod
    def _error_for(resp: httpx.Response) -> MediaLibraryError:
        """Map an error response onto the client taxonomy."""
        try:
            body = ErrorBody.model_validate(resp.json())
        except ValueError:
            body = ErrorBody()

        status = resp.status_code
        message = body.message or f"Request failed with status {status}"
        if status == 404:
            error_class: Type[MediaLibraryError] = NotFoundError
        elif status in (400, 422):
            error_class = ValidationError
        else:
            error_class = NetworkError
        logger.warning(
            "API error %d on %s %s: %s",
            status, resp.request.method, resp.request.url.path, message,
        )
        return error_class(message, status_code=status, error_code=body.error)

    @staticmethod
    def _parse(model: Type[ModelT], resp: httpx.Response) -> ModelT:
        try:
            return model.model_validate_json(resp.content)
        except SchemaError as exc:
            logger.error(
                "Unexpected %s body from %s: %s",
                model.__name__, resp.request.url.path, exc.error_count(),
            )
            raise NetworkError(
                f"Unexpected response from the media server ({resp.request.url.path})",
                status_code=resp.status_code,
            ) from exc

    # ----- folders ---------------------------------------------------------

    async def list_folders(self, parent_id: Optional[str] = None) -> list[Folder]:
        """Every folder, or only the children of *parent_id* ("root" for top level)."""
        params = {"parent_id": parent_id} if parent_id is not None else {}
        resp = await self._request("GET", "/api/media/folders", params=params)
        return self._parse(FolderList, resp).folders

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> Folder:
        payload = {"name": name, "parent_id": normalize_folder_id(parent_id)}
        resp = await self._request("POST", "/api/media/folders", json=payload)
        return self._parse(Folder, resp)

    async def update_folder(
        self,
        folder_id: str,
        name: Optional[str] = None,
        parent_id: Optional[str] = _UNSET,
    ) -> Folder:
        """Rename and/or move. Pass ``parent_id=None`` or ``"root"`` to move to root."""
        payload: dict[str, Any] = {}
        if name is not None:
            payload["name"] = name
        if parent_id is not _UNSET:
            payload["parent_id"] = normalize_folder_id(parent_id)
        resp = await self._request("PUT", f"/api/media/folders/{folder_id}", json=payload)
        return self._parse(Folder, resp)

    async def delete_folder(self, folder_id: str) -> FolderDeleteResult:
        resp = await self._request("DELETE", f"/api/media/folders/{folder_id}")
        return self._parse(FolderDeleteResult, resp)

    # ----- files -----------------------------------------------------------

    async def list_files(
        self,
        folder_id: Optional[str] = None,
        search: Optional[str] = None,
        file_type: Optional[FileType] = None,
    ) -> list[MediaFile]:
        params: dict[str, str] = {}
        folder_id = normalize_folder_id(folder_id)
        if folder_id:
            params["folder_id"] = folder_id
        if search:
            params["search"] = search
        if file_type:
            params["type"] = FileType(file_type).value
        resp = await self._request("GET", "/api/media/files", params=params)
        return self._parse(FileList, resp).files

    async def upload(self, blobs: Sequence[UploadBlob], folder_id: Optional[str] = None) -> list[MediaFile]:
        """Send the whole batch as one multipart request. Stored entirely or not at all."""
        files = [("files", (blob.filename, blob.content, blob.mime_type)) for blob in blobs]
        data = {"folder_id": normalize_folder_id(folder_id) or ""}
        try:
            resp = await self._request(
                "POST", "/api/media/upload",
                files=files, data=data, timeout=self.upload_timeout,
            )
            return self._parse(FileList, resp).files
        except UploadError:
            raise
        except MediaLibraryError as exc:
            raise UploadError(exc.message, status_code=exc.status_code, error_code=exc.error_code) from exc

    async def update_file(
        self,
        file_id: str,
        name: Optional[str] = None,
        alt_text: Optional[str] = None,
        description: Optional[str] = None,
    ) -> MediaFile:
        """Edit metadata. Only the fields given are sent."""
        payload = {
            key: value
            for key, value in (("name", name), ("alt_text", alt_text), ("description", description))
            if value is not None
        }
        resp = await self._request("PUT", f"/api/media/files/{file_id}", json=payload)
        return self._parse(MediaFile, resp)

    async def move_file(self, file_id: str, folder_id: Optional[str]) -> MediaFile:
        payload = {"folder_id": normalize_folder_id(folder_id)}
        resp = await self._request("PUT", f"/api/media/files/{file_id}/move", json=payload)
        return self._parse(MediaFile, resp)

    async def delete_file(self, file_id: str) -> None:
        await self._request("DELETE", f"/api/media/files/{file_id}")

    async def get_stats(self) -> MediaStats:
        resp = await self._request("GET", "/api/media/stats")
        return self._parse(MediaStats, resp)

    # ----- lifecycle -------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "MediaAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
