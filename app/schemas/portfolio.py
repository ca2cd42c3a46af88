"""Portfolio item schemas."""
from datetime import datetime
from pydantic import AnyHttpUrl, Field, field_validator
from app.models.inquiry import Category
from app.schemas.common import CamelModel


class PortfolioItemWrite(CamelModel):
    """Body for both add and update. image_url may be omitted only in mock upload mode, or on update."""
    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    image_url: AnyHttpUrl | None = None
    category: Category
    display_order: int = Field(default=0, ge=0)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class PortfolioItemResponse(CamelModel):
    id: int
    partner_id: int
    title: str
    description: str | None = None
    image_url: str
    category: Category
    display_order: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PortfolioItemData(CamelModel):
    portfolio_item: PortfolioItemResponse


class PortfolioListData(CamelModel):
    portfolio_items: list[PortfolioItemResponse]
