"""
Upload status reporting for one post submission
"""

from enum import Enum
from typing import Callable, Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from utils.structured_logging import get_structured_logger

logger = get_structured_logger(__name__)


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.COMPLETED, UploadStatus.FAILED)


_TRANSITIONS = {
    UploadStatus.PENDING: {UploadStatus.UPLOADING, UploadStatus.FAILED},
    UploadStatus.UPLOADING: {UploadStatus.COMPLETED, UploadStatus.FAILED},
    UploadStatus.COMPLETED: set(),
    UploadStatus.FAILED: set(),
}


class Upload(BaseModel):
    """One publish attempt to one destination account"""
    id: UUID = Field(default_factory=uuid4)
    platform: str
    account_id: UUID
    status: UploadStatus = UploadStatus.PENDING
    message: Optional[str] = None
    url: Optional[str] = None


UploadListener = Callable[[Upload], None]


class InvalidTransition(ValueError):
    """Raised when an upload would leave a terminal state or skip a step"""


class UploadStatusReporter:
    """In-memory observer of upload transitions. One instance per submission."""

    def __init__(self):
        self._uploads: Dict[UUID, Upload] = {}
        self._listeners: List[UploadListener] = []

    def subscribe(self, listener: UploadListener) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def uploads(self) -> List[Upload]:
        """Snapshot in start order"""
        return [upload.model_copy() for upload in self._uploads.values()]

    @property
    def finished(self) -> bool:
        return bool(self._uploads) and all(u.status.is_terminal for u in self._uploads.values())

    def start(self, platform: str, account_id: UUID) -> Upload:
        """Register a new attempt and move it straight to uploading"""
        upload = Upload(platform=platform, account_id=account_id)
        self._uploads[upload.id] = upload
        return self.update(upload.id, UploadStatus.UPLOADING)

    def update(
        self,
        upload_id: UUID,
        status: UploadStatus,
        message: Optional[str] = None,
        url: Optional[str] = None
    ) -> Upload:
        upload = self._uploads.get(upload_id)
        if upload is None:
            raise KeyError(f"Unknown upload: {upload_id}")

        status = UploadStatus(status)
        if status not in _TRANSITIONS[upload.status]:
            raise InvalidTransition(f"Cannot move upload from {upload.status.value} to {status.value}")

        upload.status = status
        if message is not None:
            upload.message = message
        if url is not None:
            upload.url = url

        logger.info(
            "Upload status changed",
            upload_id=str(upload.id),
            platform=upload.platform,
            account_id=str(upload.account_id),
            status=status.value,
            upload_message=upload.message,
            url=upload.url
        )
        self._emit(upload)
        return upload.model_copy()

    def reset(self) -> None:
        """Forget everything; called at the start of each submission"""
        self._uploads.clear()

    def dismiss(self) -> bool:
        """Clear the list once at least one upload has finished"""
        if not any(u.status.is_terminal for u in self._uploads.values()):
            return False
        self._uploads.clear()
        return True

    def _emit(self, upload: Upload) -> None:
        snapshot = upload.model_copy()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Upload listener failed", upload_id=str(upload.id), error=str(e))
