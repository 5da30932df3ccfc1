import logging
import re
import unicodedata
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, or_, func
from quizgen.core.errors import InvalidRequestError, NotFoundError
from quizgen.models.orm import Category

logger = logging.getLogger(__name__)

def slugify(*parts: Optional[str]) -> str:
    text = "-".join(p for p in parts if p)
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")

def get_required(db: Session, category_id: int) -> Category:
    if category_id is None:
        raise InvalidRequestError("categoryId must not be null")
    c = db.get(Category, category_id)
    if not c:
        raise NotFoundError(f"Category not found: {category_id}")
    return c

def resolve_selection_ids(db: Session, category_id: int) -> List[int]:
    """Categories to draw from when a user picks ``category_id``.

    A leaf resolves to itself; a parent resolves to itself plus its direct
    children (grandchildren are not included). Ids come back ordered.
    """
    if category_id is None:
        raise InvalidRequestError("categoryId must not be null")
    ids = db.scalars(
        select(Category.id).where(or_(Category.id == category_id, Category.parent_id == category_id)).order_by(Category.id)
    ).all()
    if category_id not in ids:
        raise NotFoundError(f"Category not found: {category_id}")
    return list(ids)

def list_roots(db: Session) -> List[Category]:
    return list(db.scalars(select(Category).where(Category.parent_id.is_(None)).order_by(Category.name)).all())

def list_children(db: Session, category_id: int) -> List[Category]:
    parent = get_required(db, category_id)
    return list(db.scalars(select(Category).where(Category.parent_id == parent.id).order_by(Category.name)).all())

def create_category(db: Session, name: str, area: Optional[str] = None, parent_id: Optional[int] = None) -> Category:
    if not name or not name.strip():
        raise InvalidRequestError("name must not be blank")
    name = name.strip()
    parent = get_required(db, parent_id) if parent_id is not None else None
    dup = db.scalar(select(func.count(Category.id)).where(
        Category.parent_id.is_(None) if parent_id is None else Category.parent_id == parent_id,
        func.lower(Category.name) == name.lower()))
    if dup:
        raise InvalidRequestError(f"Category already exists under this parent: {name}")
    slug = slugify(parent.slug if parent else area, name)
    c = Category(area=area, name=name, slug=slug, parent_id=parent.id if parent else None)
    db.add(c); db.flush()
    logger.info("Created category %s (%s) under parent %s", c.id, slug, c.parent_id)
    return c
