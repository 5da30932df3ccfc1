from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import List, Optional
from sqlalchemy.orm import Session
from quizgen.core.database import get_db
from quizgen.core.auth import require_roles
from quizgen.services import categories

router = APIRouter(dependencies=[Depends(require_roles("student", "author", "admin"))])

class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str
    area: Optional[str] = None
    parent_id: Optional[int] = None

    @classmethod
    def from_orm_category(cls, c) -> "CategoryOut":
        return cls(id=c.id, name=c.name, slug=c.slug, area=c.area, parent_id=c.parent_id)

class SelectionOut(BaseModel):
    category_id: int
    effective_ids: List[int]

@router.get("/roots", response_model=List[CategoryOut])
def list_roots(db: Session = Depends(get_db)):
    return [CategoryOut.from_orm_category(c) for c in categories.list_roots(db)]

@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return CategoryOut.from_orm_category(categories.get_required(db, category_id))

@router.get("/{category_id}/children", response_model=List[CategoryOut])
def list_children(category_id: int, db: Session = Depends(get_db)):
    return [CategoryOut.from_orm_category(c) for c in categories.list_children(db, category_id)]

@router.get("/{category_id}/ids", response_model=SelectionOut)
def resolve_selection(category_id: int, db: Session = Depends(get_db)):
    """Categories a generate call for ``category_id`` would draw from."""
    return SelectionOut(category_id=category_id, effective_ids=categories.resolve_selection_ids(db, category_id))
