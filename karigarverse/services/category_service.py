from sqlmodel import Session, select

from karigarverse.errors import NotFoundError
from karigarverse.models.category import Category


def list_categories(session: Session, include_inactive: bool = False):
    query = select(Category)
    if not include_inactive:
        query = query.where(Category.is_active == True)  # noqa: E712
    query = query.order_by(Category.sort_order, Category.name)
    return session.exec(query).all()


def get_category_by_slug(session: Session, slug: str) -> Category:
    """Only active categories are reachable by slug."""
    category = session.exec(
        select(Category).where(Category.slug == slug, Category.is_active == True)  # noqa: E712
    ).first()
    if not category:
        raise NotFoundError("Category", slug)
    return category


def get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category:
        raise NotFoundError("Category", category_id)
    return category
