"""Partner portfolio items: add, list, update, delete. A partner only touches its own items."""
import logging
import time
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.errors import NotFound, ValidationError
from app.models.partner import PartnerProfile
from app.models.portfolio import Portfolio
from app.schemas.portfolio import PortfolioItemWrite

log = logging.getLogger("uvicorn.error")


def _own_profile(db: Session, partner_user_id: int) -> PartnerProfile:
    profile = db.query(PartnerProfile).filter(PartnerProfile.user_id == partner_user_id).first()
    if not profile:
        raise NotFound("Partner profile")
    return profile


def _own_item(db: Session, partner_user_id: int, item_id: int) -> Portfolio:
    profile = _own_profile(db, partner_user_id)
    item = db.query(Portfolio).filter(Portfolio.id == item_id, Portfolio.partner_id == profile.id).first()
    if not item:
        raise NotFound("Portfolio item")
    return item


def _image_url(data: PortfolioItemWrite, settings: Settings) -> str | None:
    if data.image_url:
        return str(data.image_url)
    if settings.mock_file_upload:
        return f"{settings.mock_image_base_url}?random={int(time.time() * 1000)}"
    return None


def portfolio_for(db: Session, partner_id: int) -> list[Portfolio]:
    return (
        db.query(Portfolio)
        .filter(Portfolio.partner_id == partner_id)
        .order_by(Portfolio.display_order, Portfolio.created_at, Portfolio.id)
        .all()
    )


def add_item(db: Session, partner_user_id: int, data: PortfolioItemWrite, settings: Settings | None = None) -> Portfolio:
    settings = settings or get_settings()
    profile = _own_profile(db, partner_user_id)
    image_url = _image_url(data, settings)
    if not image_url:
        raise ValidationError("Valid image URL is required")
    item = Portfolio(
        partner_id=profile.id,
        title=data.title,
        description=data.description,
        image_url=image_url,
        category=data.category,
        display_order=data.display_order,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    log.info("[Portfolio] Item %s added for partner user %s", item.id, partner_user_id)
    return item


def list_items(db: Session, partner_user_id: int) -> list[Portfolio]:
    return portfolio_for(db, _own_profile(db, partner_user_id).id)


def update_item(db: Session, partner_user_id: int, item_id: int, data: PortfolioItemWrite) -> Portfolio:
    """Replace the item's fields. Without a new image URL the current one is kept."""
    item = _own_item(db, partner_user_id, item_id)
    item.title = data.title
    item.description = data.description
    item.image_url = str(data.image_url) if data.image_url else item.image_url
    item.category = data.category
    item.display_order = data.display_order
    item.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(item)
    log.info("[Portfolio] Item %s updated for partner user %s", item_id, partner_user_id)
    return item


def delete_item(db: Session, partner_user_id: int, item_id: int) -> None:
    item = _own_item(db, partner_user_id, item_id)
    db.delete(item)
    db.commit()
    log.info("[Portfolio] Item %s deleted for partner user %s", item_id, partner_user_id)
