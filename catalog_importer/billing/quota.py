"""
Quota Governor
Tracks each shop's plan, trial window and monthly import counter.

State transitions are evaluated lazily on every read (no scheduler):
- TRIAL becomes TRIAL_EXPIRED once the trial deadline has passed
- the import counter resets once the billing period is `billing_cycle_days` old

Reservations use a single conditional UPDATE so concurrent requests
against the same shop can never push the counter past the plan limit.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings, get_settings
from ..db.models import ShopSubscription, utcnow
from ..db.session import get_session_factory
from ..models.plans import PAID_PLANS, Plan, get_plan_config
from .errors import PlanChangeError, QuotaExceeded

logger = logging.getLogger(__name__)


def remaining_imports(subscription: ShopSubscription) -> Optional[int]:
    """
    Imports left in the current period.

    Returns:
        limit - used clamped to zero, or None when the plan has no limit
    """
    limit = get_plan_config(subscription.plan).limit
    if limit is None:
        return None
    return max(0, limit - subscription.import_count)


class QuotaGovernor:
    """
    Per-shop quota accounting.

    Construct once per process and share it; every method opens its own
    short-lived session from the injected factory.
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the governor.

        Args:
            session_factory: SQLAlchemy session factory
            settings: Application settings (trial and billing-cycle lengths)
            clock: Returns the current naive-UTC time; injectable for tests
        """
        self.session_factory = session_factory or get_session_factory()
        self.settings = settings or get_settings()
        self.clock = clock
        self.trial_length = timedelta(days=self.settings.trial_days)
        self.cycle_length = timedelta(days=self.settings.billing_cycle_days)

    # ------------------------------------------------------------------
    # Session helpers
    # ------------------------------------------------------------------

    def _run(self, operation: Callable[[Session], ShopSubscription]) -> ShopSubscription:
        """Run `operation` in a transaction and return a detached, loaded subscription."""
        session = self.session_factory()
        try:
            subscription = operation(session)
            session.commit()
            if subscription is not None:
                session.refresh(subscription)
                session.expunge(subscription)
            return subscription
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _create(self, session: Session, shop: str) -> ShopSubscription:
        now = self.clock()
        subscription = ShopSubscription(
            shop=shop,
            plan=Plan.TRIAL.value,
            trial_used=False,
            import_count=0,
            period_start=now,
            trial_ends_at=now + self.trial_length,
        )
        session.add(subscription)
        try:
            session.commit()
        except IntegrityError:
            # Another request created it first
            session.rollback()
            return session.get(ShopSubscription, shop)

        logger.info(f"Created trial subscription for {shop}", extra={"shop": shop})
        return subscription

    def _load(self, session: Session, shop: str) -> ShopSubscription:
        """Fetch (or lazily create) a subscription and apply pending transitions."""
        subscription = session.get(ShopSubscription, shop)
        if subscription is None:
            subscription = self._create(session, shop)

        now = self.clock()

        if (
            subscription.plan == Plan.TRIAL.value
            and subscription.trial_ends_at is not None
            and now > subscription.trial_ends_at
        ):
            session.execute(
                update(ShopSubscription)
                .where(ShopSubscription.shop == shop, ShopSubscription.plan == Plan.TRIAL.value)
                .values(plan=Plan.TRIAL_EXPIRED.value, trial_used=True, updated_at=now)
            )
            logger.info(f"Trial expired for {shop}", extra={"shop": shop})

        if now - subscription.period_start >= self.cycle_length:
            # Guarded on the old period start so a concurrent rollover only happens once
            session.execute(
                update(ShopSubscription)
                .where(
                    ShopSubscription.shop == shop,
                    ShopSubscription.period_start == subscription.period_start,
                )
                .values(import_count=0, period_start=now, updated_at=now)
            )
            logger.info(f"Billing period rolled over for {shop}", extra={"shop": shop})

        session.flush()
        session.refresh(subscription)
        return subscription

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_or_create_subscription(self, shop: str) -> ShopSubscription:
        """Idempotent fetch with trial-expiry and period-rollover applied."""
        return self._run(lambda session: self._load(session, shop))

    def get_remaining(self, shop: str) -> Optional[int]:
        """Remaining imports for the shop (None = unbounded)."""
        return remaining_imports(self.get_or_create_subscription(shop))

    def reserve_imports(self, shop: str, requested: int) -> None:
        """
        Atomically reserve `requested` imports against the shop's quota.

        Args:
            shop: Shop domain
            requested: Number of imports to reserve

        Raises:
            QuotaExceeded: If the plan is TRIAL_EXPIRED or headroom is insufficient
        """
        if requested < 0:
            raise ValueError("requested must be non-negative")

        session = self.session_factory()
        try:
            subscription = self._load(session, shop)
            session.commit()

            plan = Plan(subscription.plan)
            used = subscription.import_count

            if plan == Plan.TRIAL_EXPIRED:
                raise QuotaExceeded(plan, 0, used, requested)

            limit = get_plan_config(plan).limit
            if limit is None or requested == 0:
                return  # Unlimited - skip check

            # Only succeeds if there is still room; zero rows means no headroom
            result = session.execute(
                update(ShopSubscription)
                .where(
                    ShopSubscription.shop == shop,
                    ShopSubscription.plan == plan.value,
                    ShopSubscription.import_count + requested <= limit,
                )
                .values(
                    import_count=ShopSubscription.import_count + requested,
                    updated_at=self.clock(),
                )
                .execution_options(synchronize_session=False)
            )
            session.commit()

            if result.rowcount == 0:
                logger.info(
                    f"Quota exceeded for {shop}",
                    extra={"shop": shop, "plan": plan.value, "used": used, "requested": requested},
                )
                raise QuotaExceeded(plan, limit, used, requested)

            logger.info(
                f"Reserved {requested} import(s) for {shop}",
                extra={"shop": shop, "plan": plan.value, "requested": requested},
            )
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def set_plan(self, shop: str, plan) -> ShopSubscription:
        """
        Move a shop onto a paid plan, resetting the counter and billing period.

        Raises:
            PlanChangeError: If `plan` is not a paid plan
        """
        try:
            plan = Plan(plan)
        except ValueError:
            raise PlanChangeError(f"Unknown plan: {plan}", plan=str(plan))
        if plan not in PAID_PLANS:
            raise PlanChangeError(f"{plan.value} cannot be set directly", plan=plan.value)

        def operation(session: Session) -> ShopSubscription:
            now = self.clock()
            subscription = session.get(ShopSubscription, shop)
            if subscription is None:
                subscription = ShopSubscription(shop=shop, trial_ends_at=None)
                session.add(subscription)
            subscription.plan = plan.value
            subscription.trial_used = True
            subscription.import_count = 0
            subscription.period_start = now
            return subscription

        subscription = self._run(operation)
        logger.info(f"Plan for {shop} set to {plan.value}", extra={"shop": shop, "plan": plan.value})
        return subscription

    def expire(self, shop: str) -> ShopSubscription:
        """Block further imports (subscription cancelled, declined or frozen)."""

        def operation(session: Session) -> ShopSubscription:
            subscription = session.get(ShopSubscription, shop)
            if subscription is None:
                now = self.clock()
                subscription = ShopSubscription(shop=shop, import_count=0, period_start=now)
                session.add(subscription)
            subscription.plan = Plan.TRIAL_EXPIRED.value
            subscription.trial_used = True
            return subscription

        subscription = self._run(operation)
        logger.info(f"Subscription for {shop} expired", extra={"shop": shop})
        return subscription

    def mark_trial_used(self, shop: str) -> ShopSubscription:
        def operation(session: Session) -> ShopSubscription:
            subscription = self._load(session, shop)
            subscription.trial_used = True
            return subscription

        return self._run(operation)
