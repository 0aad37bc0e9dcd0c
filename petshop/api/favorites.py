"""FastAPI router exposing the favorites endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from petshop.schemas.favorites import FavoriteMutationResponse, FavoriteRequest
from petshop.schemas.product import FavoriteProduct
from petshop.services.dependencies import get_favorites_service
from petshop.services.favorites_service import FavoritesService
from petshop.utils.auth import get_current_user_id

router = APIRouter()


@router.get(
    "/favorites",
    response_model=list[FavoriteProduct],
    response_model_exclude_none=True,
)
async def get_favorites(
    user_id: int = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> list[FavoriteProduct]:
    """Return favorites in the order they were added."""

    return await service.get_favorites(user_id=user_id)


@router.post("/favorites", response_model=FavoriteMutationResponse)
async def add_favorite(
    payload: FavoriteRequest,
    user_id: int = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteMutationResponse:
    """Append a product; 409 when it is already a favorite."""

    favorites = await service.add_favorite(user_id=user_id, product_id=payload.product_id)
    return FavoriteMutationResponse(
        product_id=payload.product_id, favorite_product_ids=favorites
    )


@router.delete("/favorites", response_model=FavoriteMutationResponse)
async def remove_favorite(
    payload: FavoriteRequest,
    user_id: int = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteMutationResponse:
    """Remove a product; 400 when it is not a favorite."""

    favorites = await service.remove_favorite(
        user_id=user_id, product_id=payload.product_id
    )
    return FavoriteMutationResponse(
        product_id=payload.product_id, favorite_product_ids=favorites
    )
