"""POS checkout endpoint."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stockpilot.api.auth import get_current_user
from stockpilot.core.db import get_db
from stockpilot.models import User
from stockpilot.models.checkout_schemas import CheckoutRequest, CheckoutResult
from stockpilot.services import checkout as checkout_service
from stockpilot.services import summary as summary_service
from stockpilot.utils.datetime import today_local

router = APIRouter(prefix="/api/v1/checkout", tags=["checkout"])


@router.post("", response_model=CheckoutResult, status_code=status.HTTP_201_CREATED)
async def checkout(
    cart: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Place a cart. All lines succeed together or the cart is rejected with
    409 INSUFFICIENT_STOCK and no stock is touched.
    """
    day = cart.date or today_local()
    result = await checkout_service.checkout(db, cart.items, day, current_user)

    await summary_service.mark_dirty(db, day)
    return result
