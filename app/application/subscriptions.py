"""
Subscription use cases — CRUD подписок + расчёт суммарной стоимости за период.

Модуль работает напрямую с ORM. Даты подписок хранятся строками "MM-YYYY"
и парсятся в CalendarMonth перед любой арифметикой.
"""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.domain.calendar_month import parse_month
from app.domain.period_cost import SubscriptionInterval, total_cost, validate_window
from app.infrastructure.db.models import SubscriptionModel

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("service_name", "price", "user_id", "start_date", "end_date")


class SubscriptionValidationError(ValueError):
    pass


class SubscriptionNotFoundError(SubscriptionValidationError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_service_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise SubscriptionValidationError("service_name must not be empty")
    return name


def _validate_price(price: int) -> int:
    if price < 0:
        raise SubscriptionValidationError("price must be greater than or equal to 0")
    return price


def _normalize_end_date(end_date: str | None) -> str | None:
    """Empty string / None = open-ended; otherwise canonical MM-YYYY."""
    if not end_date:
        return None
    return str(parse_month(end_date, "end_date"))


def _get_or_raise(db: Session, sub_id: uuid.UUID) -> SubscriptionModel:
    sub = db.query(SubscriptionModel).filter(SubscriptionModel.id == sub_id).first()
    if not sub:
        raise SubscriptionNotFoundError("Subscription not found")
    return sub


# ============================================================================
# Subscriptions CRUD
# ============================================================================


class CreateSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        service_name: str,
        price: int,
        user_id: uuid.UUID,
        start_date: str,
        end_date: str | None = None,
    ) -> SubscriptionModel:
        now = _now()
        sub = SubscriptionModel(
            id=uuid.uuid4(),
            service_name=_normalize_service_name(service_name),
            price=_validate_price(price),
            user_id=user_id,
            start_date=str(parse_month(start_date, "start_date")),
            end_date=_normalize_end_date(end_date),
            created_at=now,
            updated_at=now,
        )
        self.db.add(sub)
        self.db.commit()
        self.db.refresh(sub)

        logger.info(
            "Subscription created: id=%s service_name=%s user_id=%s",
            sub.id, sub.service_name, sub.user_id,
        )
        return sub


class GetSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: uuid.UUID) -> SubscriptionModel:
        return _get_or_raise(self.db, sub_id)


def list_subscriptions(
    db: Session,
    user_id: uuid.UUID | None = None,
    service_name: str | None = None,
) -> list[SubscriptionModel]:
    """Подписки с опциональными фильтрами по владельцу и названию сервиса"""
    query = db.query(SubscriptionModel)
    if user_id is not None:
        query = query.filter(SubscriptionModel.user_id == user_id)
    if service_name is not None:
        query = query.filter(SubscriptionModel.service_name == service_name)
    return query.order_by(SubscriptionModel.created_at, SubscriptionModel.id).all()


class UpdateSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: uuid.UUID, **changes) -> SubscriptionModel:
        """
        Частичное обновление подписки

        Args:
            sub_id: ID подписки
            **changes: service_name, price, user_id, start_date, end_date
                       (end_date = None или "" делает подписку бессрочной)
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise SubscriptionValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        for field, value in changes.items():
            if value is None and field != "end_date":
                raise SubscriptionValidationError(f"{field} must not be null")

        # validation first, then load
        if "start_date" in changes:
            changes["start_date"] = str(parse_month(changes["start_date"], "start_date"))
        if "end_date" in changes:
            changes["end_date"] = _normalize_end_date(changes["end_date"])
        if "service_name" in changes:
            changes["service_name"] = _normalize_service_name(changes["service_name"])
        if "price" in changes:
            changes["price"] = _validate_price(changes["price"])

        sub = _get_or_raise(self.db, sub_id)
        for field, value in changes.items():
            setattr(sub, field, value)
        sub.updated_at = _now()
        self.db.commit()
        self.db.refresh(sub)

        logger.info("Subscription updated: id=%s fields=%s", sub_id, ",".join(sorted(changes)))
        return sub


class DeleteSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: uuid.UUID) -> None:
        sub = _get_or_raise(self.db, sub_id)
        self.db.delete(sub)
        self.db.commit()
        logger.info("Subscription deleted: id=%s", sub_id)


# ============================================================================
# Total cost
# ============================================================================


class CalculateTotalCostUseCase:
    """
    Суммарная стоимость подписок за период [start_period, end_period] (включительно).

    Период валидируется до обращения к БД: при ошибке формата/диапазона
    подписки не загружаются.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        start_period: str,
        end_period: str,
        user_id: uuid.UUID | None = None,
        service_name: str | None = None,
    ) -> int:
        window = validate_window(start_period, end_period)

        subs = list_subscriptions(self.db, user_id=user_id, service_name=service_name)
        intervals = [
            SubscriptionInterval.from_record(s.price, s.start_date, s.end_date)
            for s in subs
        ]
        result = total_cost(window, intervals)

        logger.info(
            "Total cost calculated: start_period=%s end_period=%s user_id=%s "
            "service_name=%s subscriptions=%d total_cost=%d",
            start_period, end_period, user_id, service_name, len(intervals), result,
        )
        return result
