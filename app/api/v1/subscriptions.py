"""
Subscription API endpoints
"""
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.subscriptions import (
    CreateSubscriptionUseCase, GetSubscriptionUseCase, UpdateSubscriptionUseCase,
    DeleteSubscriptionUseCase, CalculateTotalCostUseCase,
    SubscriptionNotFoundError, list_subscriptions,
)


router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


# === Request/Response models ===

class SubscriptionCreateRequest(BaseModel):
    service_name: str
    price: int = Field(ge=0)  # в месяц
    user_id: uuid.UUID
    start_date: str  # MM-YYYY
    end_date: str | None = None  # MM-YYYY, None = бессрочная


class SubscriptionUpdateRequest(BaseModel):
    service_name: str | None = None
    price: int | None = Field(default=None, ge=0)
    user_id: uuid.UUID | None = None
    start_date: str | None = None
    end_date: str | None = None


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    service_name: str
    price: int
    user_id: uuid.UUID
    start_date: str
    end_date: str | None = None
    created_at: datetime
    updated_at: datetime


class TotalCostRequest(BaseModel):
    start_period: str  # MM-YYYY
    end_period: str  # MM-YYYY
    user_id: uuid.UUID | None = None
    service_name: str | None = None


class TotalCostResponse(BaseModel):
    total_cost: int


# === Helper function ===

def _raise_http(e: ValueError):
    """Map use-case errors to HTTP errors"""
    if isinstance(e, SubscriptionNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


# === Endpoints ===

@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def create_subscription(
    req: SubscriptionCreateRequest,
    db: Session = Depends(get_db)
):
    """Создать подписку"""
    try:
        sub = CreateSubscriptionUseCase(db).execute(
            service_name=req.service_name,
            price=req.price,
            user_id=req.user_id,
            start_date=req.start_date,
            end_date=req.end_date,
        )
    except ValueError as e:
        _raise_http(e)
    return sub


@router.get("", response_model=list[SubscriptionResponse])
def get_subscriptions(
    user_id: uuid.UUID | None = None,
    service_name: str | None = None,
    db: Session = Depends(get_db)
):
    """Список подписок с фильтрами по user_id и service_name"""
    return list_subscriptions(db, user_id=user_id, service_name=service_name or None)


@router.post("/total-cost", response_model=TotalCostResponse)
def get_total_cost(
    req: TotalCostRequest,
    db: Session = Depends(get_db)
):
    """Суммарная стоимость подписок за период"""
    try:
        total = CalculateTotalCostUseCase(db).execute(
            start_period=req.start_period,
            end_period=req.end_period,
            user_id=req.user_id,
            service_name=req.service_name,
        )
    except ValueError as e:
        _raise_http(e)
    return TotalCostResponse(total_cost=total)


@router.get("/{sub_id}", response_model=SubscriptionResponse)
def get_subscription(
    sub_id: uuid.UUID,
    db: Session = Depends(get_db)
):
    """Получить подписку по ID"""
    try:
        return GetSubscriptionUseCase(db).execute(sub_id)
    except ValueError as e:
        _raise_http(e)


@router.put("/{sub_id}", response_model=SubscriptionResponse)
def update_subscription(
    sub_id: uuid.UUID,
    req: SubscriptionUpdateRequest,
    db: Session = Depends(get_db)
):
    """
    Обновить подписку (только переданные поля)

    end_date: null или "" делает подписку бессрочной; если поле не передано, end_date не меняется
    """
    try:
        return UpdateSubscriptionUseCase(db).execute(
            sub_id, **req.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        _raise_http(e)


@router.delete("/{sub_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(
    sub_id: uuid.UUID,
    db: Session = Depends(get_db)
):
    """Удалить подписку"""
    try:
        DeleteSubscriptionUseCase(db).execute(sub_id)
    except ValueError as e:
        _raise_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
