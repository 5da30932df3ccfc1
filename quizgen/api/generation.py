from fastapi import APIRouter, Depends
from pydantic import BaseModel, constr
from typing import List, Optional, Literal
from datetime import datetime
from sqlalchemy.orm import Session
from quizgen.core.database import get_db
from quizgen.core.auth import require_roles, ensure_self_or_admin, TokenData
from quizgen.models.domain import Difficulty, GenerationMode, GenerationRequest
from quizgen.services.bank import QuizBank
from quizgen.services.generation import QuizGenerator

router = APIRouter()

class GenerateIn(BaseModel):
    user_id: Optional[constr(min_length=1, max_length=36)] = None
    category_id: Optional[int] = None
    total: int
    quiz_id: Optional[int] = None
    mode_override: Optional[Literal["RANDOM", "ADAPTIVE"]] = None
    difficulty_filter: Optional[Literal["EASY", "MEDIUM", "HARD"]] = None

    def to_request(self) -> GenerationRequest:
        return GenerationRequest(
            user_id=self.user_id, category_id=self.category_id, total=self.total, quiz_id=self.quiz_id,
            mode_override=GenerationMode(self.mode_override) if self.mode_override else None,
            difficulty_filter=Difficulty(self.difficulty_filter) if self.difficulty_filter else None,
        )

class QuotaOut(BaseModel):
    easy: int
    medium: int
    hard: int
    sum: int

class QuestionOut(BaseModel):
    id: int
    type: str
    category_id: int
    difficulty: str
    question: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm_question(cls, q) -> "QuestionOut":
        return cls(id=q.id, type=q.type.value, category_id=q.category_id, difficulty=q.difficulty.value,
                   question=q.question, created_at=q.created_at, updated_at=q.updated_at)

class GenerationOut(BaseModel):
    quiz_id: int
    attempt_id: int
    mode: str
    quota: QuotaOut
    questions: List[QuestionOut]

def get_generator(db: Session = Depends(get_db)) -> QuizGenerator:
    return QuizGenerator(QuizBank(db))

@router.post("/generate", response_model=GenerationOut)
def generate(payload: GenerateIn, user: TokenData = Depends(require_roles("student", "admin")),
             gen: QuizGenerator = Depends(get_generator), db: Session = Depends(get_db)):
    if payload.user_id is not None:
        ensure_self_or_admin(user, payload.user_id)
    result = gen.generate(payload.to_request())
    db.commit()
    return GenerationOut(
        quiz_id=result.quiz_id, attempt_id=result.attempt_id, mode=result.mode.value,
        quota=QuotaOut(**result.quota.as_dict()),
        questions=[QuestionOut.from_orm_question(q) for q in result.questions],
    )

@router.post("/quota", response_model=QuotaOut)
def quota_preview(payload: GenerateIn, user: TokenData = Depends(require_roles("student", "admin")),
                  gen: QuizGenerator = Depends(get_generator)):
    if payload.user_id is not None:
        ensure_self_or_admin(user, payload.user_id)
    return QuotaOut(**gen.compute_quota(payload.to_request()).as_dict())

class HistoryOut(BaseModel):
    user_id: str
    category_id: int
    completed_count: int

class AccuracyOut(BaseModel):
    user_id: str
    category_id: int
    easy: float
    medium: float
    hard: float

@router.get("/history/count", response_model=HistoryOut)
def completed_count(user_id: str, category_id: int, user: TokenData = Depends(require_roles("student", "admin")),
                    db: Session = Depends(get_db)):
    ensure_self_or_admin(user, user_id)
    count = QuizBank(db).count_completed_quizzes(user_id, category_id)
    return HistoryOut(user_id=user_id, category_id=category_id, completed_count=count)

@router.get("/accuracy", response_model=AccuracyOut)
def accuracy(user_id: str, category_id: int, user: TokenData = Depends(require_roles("student", "admin")),
             db: Session = Depends(get_db)):
    """Per-difficulty accuracy the ADAPTIVE mode would use for this user and category."""
    ensure_self_or_admin(user, user_id)
    acc = QuizBank(db).load_accuracy(user_id, category_id)
    return AccuracyOut(user_id=user_id, category_id=category_id, easy=acc.easy, medium=acc.medium, hard=acc.hard)
