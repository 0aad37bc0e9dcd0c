"""Pydantic schemas that power the favorites API surface."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FavoriteRequest(BaseModel):
    """Body shared by the add and remove favorite endpoints."""

    product_id: int = Field(
        ...,
        strict=True,
        validation_alias=AliasChoices("productId", "productID", "product_id"),
    )


class FavoriteMutationResponse(BaseModel):
    """Echo of the affected product plus the resulting favorites id list."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productId")
    favorite_product_ids: list[int] = Field(..., alias="favoriteProductId")


__all__ = ["FavoriteMutationResponse", "FavoriteRequest"]
