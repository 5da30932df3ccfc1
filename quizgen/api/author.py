from fastapi import APIRouter, Depends
from pydantic import BaseModel, constr
from typing import List, Optional
from sqlalchemy.orm import Session
from quizgen.core.database import get_db
from quizgen.core.auth import require_roles
from quizgen.models.domain import Difficulty, QuestionType
from quizgen.services.categories import create_category
from quizgen.services.questions import create_question

router = APIRouter()

class CategoryCreate(BaseModel):
    name: constr(min_length=1, max_length=150)
    area: Optional[constr(max_length=100)] = None
    parent_id: Optional[int] = None

class ChoiceIn(BaseModel):
    text: str
    is_correct: bool = False

class QuestionCreate(BaseModel):
    category_id: int
    question: str
    difficulty: Difficulty = Difficulty.MEDIUM
    type: QuestionType = QuestionType.UNIQUE_CHOICE
    choices: List[ChoiceIn] = []

@router.post("/categories", status_code=201, dependencies=[Depends(require_roles("author", "admin"))])
def new_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    c = create_category(db, payload.name, area=payload.area, parent_id=payload.parent_id)
    db.commit()
    return {"category_id": c.id, "slug": c.slug, "parent_id": c.parent_id}

@router.post("/questions", status_code=201, dependencies=[Depends(require_roles("author", "admin"))])
def new_question(payload: QuestionCreate, db: Session = Depends(get_db)):
    q = create_question(db, payload.category_id, payload.question, payload.difficulty, payload.type,
                        [c.model_dump() for c in payload.choices])
    db.commit()
    return {"question_id": q.id, "category_id": q.category_id, "difficulty": q.difficulty.value,
            "choice_ids": [c.id for c in q.choices]}
