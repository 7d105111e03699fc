"""
Publisher interface: programmatic publish/search/edit on a destination platform
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from models.database import PlatformAccount


class PublishRequest(BaseModel):
    """What a publisher needs to create one item on a destination"""
    title: str
    description: Optional[str] = None
    media_url: Optional[str] = None
    content_type: Optional[str] = None


class PublishResult(BaseModel):
    """Outcome of a publish or edit call"""
    success: bool
    external_id: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None


class BasePublisher(ABC):
    """Base class for destination publishers"""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Platform identifier"""
        pass

    def supports(self, content_type: Optional[str]) -> bool:
        """Whether this publisher can publish media of the given content type"""
        return False

    @property
    def supports_edit(self) -> bool:
        return False

    @abstractmethod
    async def publish(self, account: PlatformAccount, request: PublishRequest) -> PublishResult:
        """Create the item on the destination"""
        pass

    async def find_existing(self, account: PlatformAccount, title: str) -> Optional[str]:
        """External id of a previously published item with this title"""
        return None

    async def update(
        self,
        account: PlatformAccount,
        external_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None
    ) -> PublishResult:
        """Update title/description of an existing item"""
        return PublishResult(success=False, external_id=external_id, error="Editing is not supported")
