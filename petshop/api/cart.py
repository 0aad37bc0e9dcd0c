"""FastAPI router exposing the shopping cart endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from petshop.schemas.cart import CartItem, CartUpdateRequest
from petshop.services.cart_service import CartService
from petshop.services.dependencies import get_cart_service
from petshop.utils.auth import get_current_user_id

router = APIRouter()


@router.get(
    "/cart",
    response_model=list[CartItem],
    response_model_exclude_none=True,
)
async def get_cart(
    user_id: int = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
) -> list[CartItem]:
    """Return the caller's cart ordered by product id; empty list when empty."""

    return await service.get_cart(user_id=user_id)


@router.post(
    "/product/cart",
    response_model=list[CartItem],
    response_model_exclude_none=True,
)
async def add_to_cart(
    payload: CartUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
) -> list[CartItem]:
    """Apply a signed quantity delta and return the whole updated cart."""

    return await service.add_to_cart(
        user_id=user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )


@router.delete("/cart", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cart(
    user_id: int = Depends(get_current_user_id),
    service: CartService = Depends(get_cart_service),
) -> Response:
    """Remove every line from the caller's cart."""

    await service.clear_cart(user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
