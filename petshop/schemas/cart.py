"""Pydantic schemas for the shopping cart endpoints."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field

from petshop.schemas.product import ProductSummary


class CartItem(ProductSummary):
    """A cart line: product id, its quantity, and optional display fields."""

    quantity: int = Field(..., gt=0, description="Units of the product in the cart")

    @classmethod
    def from_lookup(
        cls, product_id: int, quantity: int, summary: ProductSummary | None
    ) -> "CartItem":
        if summary is None:
            return cls(product_id=product_id, quantity=quantity)
        return cls(**summary.model_dump(), quantity=quantity)


class CartUpdateRequest(BaseModel):
    """Body of ``POST /api/v1/product/cart``.

    ``quantity`` is a signed delta applied to the current quantity, not an
    absolute target.  Negative values decrement and remove the line once the
    result reaches zero.  A missing ``quantity`` is zero, which returns the
    current cart without changing it.
    """

    product_id: int = Field(
        ...,
        strict=True,
        validation_alias=AliasChoices("productID", "productId", "product_id"),
    )
    quantity: int = Field(0, strict=True)


__all__ = ["CartItem", "CartUpdateRequest"]
