from datetime import date, timedelta
from fastapi import APIRouter, Query
from starlette import status
from utils.deps import db_dependency, user_dependency
from services.analytics_service import AnalyticsService
from services.payment_service import PaymentService


router = APIRouter(
    prefix="/admin/business",
    tags=["admin"]
)

# datetime(year + 1, 1, 1) has to stay representable
YEAR_QUERY = Query(ge=1, le=9998)


@router.get("/daily", status_code=status.HTTP_200_OK)
async def daily_business(user: user_dependency, db: db_dependency, day: date = Query(alias="date")):
    return AnalyticsService.daily(db, day)


@router.get("/monthly", status_code=status.HTTP_200_OK)
async def monthly_business(user: user_dependency, db: db_dependency,
                           month: int = Query(ge=1, le=12), year: int = YEAR_QUERY):
    return AnalyticsService.monthly(db, month, year)


@router.get("/yearly", status_code=status.HTTP_200_OK)
async def yearly_business(user: user_dependency, db: db_dependency, year: int = YEAR_QUERY):
    return AnalyticsService.yearly(db, year)


@router.get("/overall", status_code=status.HTTP_200_OK)
async def overall_business(user: user_dependency, db: db_dependency):
    return AnalyticsService.overall(db)


@router.get("/pending-orders", status_code=status.HTTP_200_OK)
async def stale_pending_orders(user: user_dependency, db: db_dependency,
                               older_than_minutes: int = Query(default=30, ge=0, alias="olderThanMinutes")):
    """
    PENDING orders older than the threshold, for manual reconciliation with
    the payment gateway.
    """
    orders = PaymentService.find_stale_pending_orders(timedelta(minutes=older_than_minutes), db)

    return {
        "count": len(orders),
        "orders": [
            {
                "orderId": order.order_id,
                "userId": order.user_id,
                "totalAmount": order.total_amount,
                "createdAt": order.created_at
            }
            for order in orders
        ]
    }
