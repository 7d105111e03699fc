"""
Publisher registry keyed by platform id
"""

from typing import Dict, List, Optional

from utils.config import Config, get_config
from .base import BasePublisher
from .null import NullPublisher
from .youtube import YouTubePublisher


class PublisherRegistry:
    """Resolves the publisher for a platform, NullPublisher when none is registered"""

    def __init__(self, publishers: Optional[Dict[str, BasePublisher]] = None):
        self._publishers: Dict[str, BasePublisher] = dict(publishers or {})

    def register(self, publisher: BasePublisher) -> None:
        self._publishers[publisher.platform_name] = publisher

    def get(self, platform: str) -> BasePublisher:
        platform = platform.lower()
        if platform not in self._publishers:
            self._publishers[platform] = NullPublisher(platform)
        return self._publishers[platform]

    def publishing_platforms(self) -> List[str]:
        """Platforms with a real publisher"""
        return [
            name for name, publisher in self._publishers.items()
            if not isinstance(publisher, NullPublisher)
        ]


def build_publisher_registry(config: Optional[Config] = None) -> PublisherRegistry:
    """Default registry with every implemented publisher"""
    config = config or get_config()
    registry = PublisherRegistry()
    registry.register(YouTubePublisher(config))
    return registry
