"""
Google Drive Store
==================

Thin wrapper around the Drive v3 API covering exactly what the import
needs: list a folder, download a screenshot, upload a cropped image as a
Google Doc (which makes Drive run OCR on it), export that Doc as plain
text, move files between folders and rename them.

The googleapiclient service object is not thread-safe, so each worker
thread gets its own. For tests, pass a fake `service` and it is shared.
"""
from __future__ import annotations

import io
import threading
from typing import Callable, Dict, List, Optional

from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload

from isk_import import config
from isk_import.models import DerivedDocument, SourceFile

_FILE_FIELDS = "id, name, mimeType, parents, webViewLink"


def _get_drive_service():
    """Create a Google Drive API service using the shared credentials."""
    creds = config.get_credentials()
    return build("drive", "v3", credentials=creds, cache_discovery=False)


class DriveStore:
    """Document-store collaborator backed by Google Drive."""

    def __init__(
        self,
        service: Optional[object] = None,
        service_factory: Optional[Callable[[], object]] = None,
    ):
        self._shared_service = service
        self._service_factory = service_factory or _get_drive_service
        self._local = threading.local()

    @classmethod
    def from_service(cls, service: object) -> "DriveStore":
        """Helper for unit tests to inject a fake Drive service."""
        return cls(service=service)

    @property
    def service(self):
        if self._shared_service is not None:
            return self._shared_service
        svc = getattr(self._local, "service", None)
        if svc is None:
            svc = self._service_factory()
            self._local.service = svc
        return svc

    # ─────────────────────────────────────────────────────────────
    # Listing
    # ─────────────────────────────────────────────────────────────

    def list_children(
        self,
        folder_id: str,
        folders_only: bool = False,
        files_only: bool = False,
    ) -> List[Dict]:
        """Return all non-trashed direct children of a folder, following pagination."""
        query = f"'{folder_id}' in parents and trashed = false"
        if folders_only:
            query += f" and mimeType = '{config.FOLDER_MIME_TYPE}'"
        elif files_only:
            query += f" and mimeType != '{config.FOLDER_MIME_TYPE}'"

        items: List[Dict] = []
        page_token = None
        while True:
            response = self.service.files().list(
                q=query,
                pageToken=page_token,
                fields=f"nextPageToken, files({_FILE_FIELDS})",
            ).execute()
            items.extend(response.get("files", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        return items

    def list_source_files(self, folder_id: str) -> List[SourceFile]:
        return [
            SourceFile.from_api(item, parent_id=folder_id)
            for item in self.list_children(folder_id, files_only=True)
        ]

    def find_child(
        self,
        folder_id: str,
        name: str,
        folders_only: bool = False,
        mime_type: Optional[str] = None,
    ) -> Optional[Dict]:
        """First child called `name`, optionally restricted to one MIME type."""
        for item in self.list_children(folder_id, folders_only=folders_only):
            if item.get("name") != name:
                continue
            if mime_type and item.get("mimeType") != mime_type:
                continue
            return item
        return None

    # ─────────────────────────────────────────────────────────────
    # Creation
    # ─────────────────────────────────────────────────────────────

    def _create_entity(self, name: str, parent_id: str, mime_type: str) -> Dict:
        body = {"name": name, "mimeType": mime_type, "parents": [parent_id]}
        return self.service.files().create(body=body, fields=_FILE_FIELDS).execute()

    def create_folder(self, name: str, parent_id: str) -> Dict:
        return self._create_entity(name, parent_id, config.FOLDER_MIME_TYPE)

    def create_spreadsheet(self, name: str, parent_id: str) -> Dict:
        return self._create_entity(name, parent_id, config.SPREADSHEET_MIME_TYPE)

    def create_document_from_image(
        self,
        name: str,
        parent_id: str,
        image_bytes: bytes,
        image_mime_type: str = "image/png",
    ) -> DerivedDocument:
        """
        Upload image content as a Google Doc.

        Converting an image to the Docs MIME type makes Drive run OCR on it;
        the recognised text becomes the document body.
        """
        body = {
            "name": name,
            "mimeType": config.DOCUMENT_MIME_TYPE,
            "parents": [parent_id],
        }
        media = MediaIoBaseUpload(io.BytesIO(image_bytes), mimetype=image_mime_type, resumable=False)
        created = self.service.files().create(
            body=body,
            media_body=media,
            fields=_FILE_FIELDS,
        ).execute()
        return DerivedDocument.from_api(created, parent_id=parent_id)

    # ─────────────────────────────────────────────────────────────
    # Content
    # ─────────────────────────────────────────────────────────────

    def download(self, file_id: str) -> bytes:
        return self.service.files().get_media(fileId=file_id).execute()

    def export_text(self, file_id: str) -> str:
        """Export a Google Doc as plain text (Drive prefixes a BOM, which is dropped)."""
        content = self.service.files().export(
            fileId=file_id,
            mimeType=config.EXPORT_MIME_TYPE,
        ).execute()
        if isinstance(content, bytes):
            return content.decode("utf-8-sig", errors="replace")
        return content.lstrip("\ufeff")

    # ─────────────────────────────────────────────────────────────
    # Relocation
    # ─────────────────────────────────────────────────────────────

    def move(self, file_id: str, from_folder_id: str, to_folder_id: str) -> Dict:
        return self.service.files().update(
            fileId=file_id,
            addParents=to_folder_id,
            removeParents=from_folder_id,
            fields="id, parents",
        ).execute()

    def rename(self, file_id: str, new_name: str) -> Dict:
        return self.service.files().update(
            fileId=file_id,
            body={"name": new_name},
            fields="id, name",
        ).execute()
