"""
Publisher for platforms without programmatic publishing
"""

from models.database import PlatformAccount
from .base import BasePublisher, PublishRequest, PublishResult


class NullPublisher(BasePublisher):
    """Accepts nothing. The post is recorded but no provider call is made."""

    def __init__(self, platform: str):
        self._platform = platform

    @property
    def platform_name(self) -> str:
        return self._platform

    async def publish(self, account: PlatformAccount, request: PublishRequest) -> PublishResult:
        return PublishResult(success=False, error=f"Publishing to {self._platform} is not supported")
