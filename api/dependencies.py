"""
Service providers for FastAPI dependency injection
"""

from functools import lru_cache

from services.billing import BillingService
from services.media_store import MediaStore
from services.platforms.account_linker import AccountLinkService
from services.platforms.account_store import AccountStore
from services.post_orchestrator import PostOrchestrator
from services.post_store import PostStore
from services.publishers.registry import PublisherRegistry, build_publisher_registry
from utils.config import get_config
from utils.supabase_client import get_supabase_client


@lru_cache()
def get_account_store() -> AccountStore:
    return AccountStore()


@lru_cache()
def get_post_store() -> PostStore:
    return PostStore()


@lru_cache()
def get_account_link_service() -> AccountLinkService:
    return AccountLinkService(store=get_account_store())


@lru_cache()
def get_publisher_registry() -> PublisherRegistry:
    return build_publisher_registry(get_config())


@lru_cache()
def get_post_orchestrator() -> PostOrchestrator:
    return PostOrchestrator(
        accounts=get_account_store(),
        posts=get_post_store(),
        media=MediaStore(get_supabase_client(), bucket=get_config().media_bucket),
        publishers=get_publisher_registry()
    )


@lru_cache()
def get_billing_service() -> BillingService:
    return BillingService(get_config())
