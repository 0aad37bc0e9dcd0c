"""Catalog read models used to decorate cart and favorites responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProductSummary(BaseModel):
    """Display metadata for one product as returned by the catalog."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="productID", gt=0)
    name: str | None = Field(None, alias="productName")
    name_th: str | None = Field(None, alias="productNameTH")
    description: str | None = Field(None, alias="productDesc")
    description_th: str | None = Field(None, alias="productDescTH")
    price: int | None = Field(None, alias="productPrice")
    image: str | None = Field(None, alias="productImg")
    score: int | None = Field(None, alias="score")


class FavoriteProduct(ProductSummary):
    """A favorited product id plus whatever catalog fields could be resolved.

    Only ``productID`` is guaranteed; the display fields stay ``None`` when the
    catalog had no match or the lookup was skipped.
    """

    @classmethod
    def from_lookup(
        cls, product_id: int, summary: ProductSummary | None
    ) -> "FavoriteProduct":
        if summary is None:
            return cls(product_id=product_id)
        return cls(**summary.model_dump())


__all__ = ["FavoriteProduct", "ProductSummary"]
