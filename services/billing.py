"""
Billing service: Stripe checkout, customer portal and subscription status
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import stripe
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert

from models.database import Subscriber, utcnow
from utils.auth import UserSession
from utils.config import Config
from utils.database import get_session
from utils.exceptions import (
    ConfigurationError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from utils.structured_logging import get_structured_logger

logger = get_structured_logger(__name__)

PRODUCT_NAME = "MultiMediaBlast Pro Subscription"
PRODUCT_DESCRIPTION = "Access to all premium features with a 7-day free trial"
MONTHLY_PRICE_CENTS = 900
TRIAL_DAYS = 7
SUBSCRIPTION_TIER = "pro"
ACTIVE_STATUSES = ("active", "trialing")


class SubscriptionStatus(BaseModel):
    subscribed: bool
    subscription_tier: Optional[str] = None
    subscription_end: Optional[datetime] = None
    in_trial: bool = False


class SubscriberStore:
    """Local mirror of the Stripe customer and subscription state"""

    def __init__(self, session_factory: Callable = get_session):
        self._session_factory = session_factory

    async def get_by_email(self, email: str) -> Optional[Subscriber]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(Subscriber).where(Subscriber.email == email))
                return result.scalar_one_or_none()
        except Exception as e:
            logger.error("Subscriber lookup failed", error=str(e))
            raise DatabaseError("Subscriber lookup failed", {"error": str(e)})

    async def upsert(self, user_id, email: str, **values: Any) -> None:
        """Insert or update the row keyed by email"""
        values = {**values, "updated_at": utcnow()}
        stmt = insert(Subscriber).values(user_id=user_id, email=email, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Subscriber.email],
            set_={"user_id": user_id, **values}
        )
        try:
            async with self._session_factory() as db:
                await db.execute(stmt)
                await db.commit()
        except Exception as e:
            logger.error("Subscriber upsert failed", error=str(e))
            raise DatabaseError("Failed to save subscriber", {"error": str(e)})


class StripeGateway:
    """Blocking Stripe SDK calls pushed onto a worker thread"""

    def __init__(self, api_key: str):
        self.api_key = api_key

    async def _call(self, fn, **kwargs):
        try:
            return await asyncio.to_thread(fn, api_key=self.api_key, **kwargs)
        except stripe.StripeError as e:
            logger.error("Stripe request failed", error=str(e))
            raise ExternalServiceError(
                f"Stripe request failed: {e.user_message or str(e)}",
                {"service": "stripe"}
            )

    async def find_customer_id(self, email: str) -> Optional[str]:
        customers = await self._call(stripe.Customer.list, email=email, limit=1)
        return customers.data[0].id if customers.data else None

    async def create_customer(self, email: str, user_id: str) -> str:
        customer = await self._call(stripe.Customer.create, email=email, metadata={"user_id": user_id})
        return customer.id

    async def active_subscription(self, customer_id: str):
        subscriptions = await self._call(stripe.Subscription.list, customer=customer_id, status="all", limit=10)
        for subscription in subscriptions.data:
            if subscription.status in ACTIVE_STATUSES:
                return subscription
        return None

    async def create_checkout_session(self, customer_id: str, origin: str) -> str:
        session = await self._call(
            stripe.checkout.Session.create,
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": "usd",
                    "product_data": {
                        "name": PRODUCT_NAME,
                        "description": PRODUCT_DESCRIPTION,
                    },
                    "unit_amount": MONTHLY_PRICE_CENTS,
                    "recurring": {"interval": "month"},
                },
                "quantity": 1,
            }],
            mode="subscription",
            subscription_data={"trial_period_days": TRIAL_DAYS},
            success_url=f"{origin}/dashboard?subscription=success",
            cancel_url=f"{origin}/dashboard?subscription=canceled",
        )
        return session.url

    async def create_portal_session(self, customer_id: str, origin: str) -> str:
        session = await self._call(
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=f"{origin}/dashboard",
        )
        return session.url


def period_end(subscription) -> Optional[datetime]:
    """current_period_end lives on the subscription or, in newer API versions, on its items"""
    end = getattr(subscription, "current_period_end", None)
    if end is None:
        try:
            items = subscription["items"]["data"]
            end = items[0]["current_period_end"] if items else None
        except (KeyError, TypeError):
            end = None
    return datetime.fromtimestamp(end, tz=timezone.utc) if end else None


class BillingService:
    """Subscription gate for the dashboard"""

    def __init__(
        self,
        config: Config,
        subscribers: Optional[SubscriberStore] = None,
        gateway: Optional[StripeGateway] = None
    ):
        self.config = config
        self.subscribers = subscribers or SubscriberStore()
        self._gateway = gateway

    @property
    def gateway(self) -> StripeGateway:
        if self._gateway is None:
            if not self.config.stripe_secret_key:
                raise ConfigurationError("STRIPE_SECRET_KEY is not set", {"service": "stripe"})
            self._gateway = StripeGateway(self.config.stripe_secret_key)
        return self._gateway

    @staticmethod
    def _email(session: UserSession) -> str:
        if not session.email:
            raise ValidationError("User not authenticated or email not available", {"field": "email"})
        return session.email

    async def _customer_id(self, session: UserSession, create: bool = False) -> Optional[str]:
        """Stored customer id, else a Stripe lookup by email, else (optionally) a new customer"""
        email = self._email(session)
        gateway = self.gateway

        subscriber = await self.subscribers.get_by_email(email)
        if subscriber and subscriber.stripe_customer_id:
            return subscriber.stripe_customer_id

        customer_id = await gateway.find_customer_id(email)
        if customer_id:
            logger.info("Found existing Stripe customer", customer_id=customer_id)
        elif create:
            customer_id = await gateway.create_customer(email, str(session.user_id))
            logger.info("Created new Stripe customer", customer_id=customer_id)
        else:
            return None

        await self.subscribers.upsert(session.user_id, email, stripe_customer_id=customer_id)
        return customer_id

    async def check_subscription(self, session: UserSession) -> SubscriptionStatus:
        email = self._email(session)
        customer_id = await self._customer_id(session)

        if not customer_id:
            logger.info("No Stripe customer found", user_id=str(session.user_id))
            await self.subscribers.upsert(session.user_id, email, subscribed=False)
            return SubscriptionStatus(subscribed=False)

        subscription = await self.gateway.active_subscription(customer_id)
        status = SubscriptionStatus(subscribed=False)
        if subscription is not None:
            status = SubscriptionStatus(
                subscribed=True,
                subscription_tier=SUBSCRIPTION_TIER,
                subscription_end=period_end(subscription),
                in_trial=subscription.status == "trialing"
            )
            logger.info(
                "Active subscription found",
                subscription_id=subscription.id,
                end_date=status.subscription_end.isoformat() if status.subscription_end else None,
                in_trial=status.in_trial
            )

        await self.subscribers.upsert(
            session.user_id,
            email,
            stripe_customer_id=customer_id,
            subscribed=status.subscribed,
            subscription_tier=status.subscription_tier,
            subscription_end=status.subscription_end
        )
        return status

    async def create_checkout(self, session: UserSession, origin: str) -> Dict[str, str]:
        customer_id = await self._customer_id(session, create=True)
        url = await self.gateway.create_checkout_session(customer_id, origin.rstrip("/"))
        logger.info("Checkout session created", customer_id=customer_id)
        return {"url": url}

    async def customer_portal(self, session: UserSession, origin: str) -> Dict[str, str]:
        customer_id = await self._customer_id(session)
        if not customer_id:
            raise NotFoundError("No Stripe customer found for this user", {"service": "stripe"})
        url = await self.gateway.create_portal_session(customer_id, origin.rstrip("/"))
        logger.info("Customer portal session created", customer_id=customer_id)
        return {"url": url}
