"""
OAuth bridge registry for dependency injection
"""

from typing import Dict, Type, Optional, List

from utils.config import Config, get_config
from .base import BaseOAuthBridge
from .facebook import FacebookBridge
from .instagram import InstagramBridge
from .tiktok import TikTokBridge
from .youtube import YouTubeBridge


class BridgeRegistry:
    """Registry for platform OAuth bridges"""

    def __init__(self, config: Optional[Config] = None):
        self._config = config
        self._bridges: Dict[str, Type[BaseOAuthBridge]] = {
            "youtube": YouTubeBridge,
            "tiktok": TikTokBridge,
            "instagram": InstagramBridge,
            "facebook": FacebookBridge,
        }
        self._instances: Dict[str, BaseOAuthBridge] = {}

    def get_bridge(self, platform: str) -> Optional[BaseOAuthBridge]:
        """Get bridge instance"""
        platform = platform.lower()

        if platform not in self._bridges:
            return None

        if platform not in self._instances:
            config = self._config or get_config()
            self._instances[platform] = self._bridges[platform](config)

        return self._instances[platform]

    def list_platforms(self) -> List[str]:
        """List all supported platforms"""
        return list(self._bridges.keys())


# Global registry instance
bridge_registry = BridgeRegistry()


def get_bridge(platform: str) -> BaseOAuthBridge:
    """Dependency injection function for OAuth bridges"""
    bridge = bridge_registry.get_bridge(platform)
    if not bridge:
        raise ValueError(f"Unsupported platform: {platform}")
    return bridge
