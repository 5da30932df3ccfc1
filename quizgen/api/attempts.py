from fastapi import APIRouter, Depends
from pydantic import BaseModel, confloat, constr
from typing import List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from quizgen.core.database import get_db
from quizgen.core.auth import require_roles, ensure_self_or_admin, TokenData
from quizgen.services import quizzes

router = APIRouter()

class SelectedChoice(BaseModel):
    question_id: int
    choice_id: int

class ChoicesSubmit(BaseModel):
    selected_choices: List[SelectedChoice]

class AttemptOut(BaseModel):
    attempt_id: int
    quiz_id: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

class TextAnswerSubmit(BaseModel):
    question_id: int
    answer_text: constr(min_length=1, max_length=10000)

class TextAnswerGrade(BaseModel):
    is_correct: Optional[bool] = None
    score: Optional[confloat(ge=0.0, le=1.0)] = None
    feedback: Optional[str] = None

class TextAnswerOut(BaseModel):
    attempt_id: int
    question_id: int
    answer_text: str
    is_correct: Optional[bool] = None
    score: Optional[float] = None
    feedback: Optional[str] = None

    @classmethod
    def from_orm_answer(cls, t) -> "TextAnswerOut":
        return cls(attempt_id=t.attempt_id, question_id=t.question_id, answer_text=t.answer_text,
                   is_correct=t.is_correct, score=t.score, feedback=t.feedback)

def _owned_attempt(db: Session, attempt_id: int, user: TokenData):
    attempt = quizzes.get_attempt(db, attempt_id)
    ensure_self_or_admin(user, quizzes.get_quiz(db, attempt.quiz_id).user_id)
    return attempt

def _out(a) -> AttemptOut:
    return AttemptOut(attempt_id=a.id, quiz_id=a.quiz_id, started_at=a.started_at, completed_at=a.completed_at)

@router.post("/{attempt_id}/choices", response_model=AttemptOut)
def submit_choices(attempt_id: int, payload: ChoicesSubmit,
                   user: TokenData = Depends(require_roles("student", "admin")), db: Session = Depends(get_db)):
    _owned_attempt(db, attempt_id, user)
    a = quizzes.submit_choices(db, attempt_id, [(s.question_id, s.choice_id) for s in payload.selected_choices])
    db.commit(); db.refresh(a)
    return _out(a)

@router.post("/{attempt_id}/text-answers", response_model=TextAnswerOut, status_code=201)
def submit_text_answer(attempt_id: int, payload: TextAnswerSubmit,
                       user: TokenData = Depends(require_roles("student", "admin")), db: Session = Depends(get_db)):
    _owned_attempt(db, attempt_id, user)
    t = quizzes.submit_text_answer(db, attempt_id, payload.question_id, payload.answer_text)
    db.commit(); db.refresh(t)
    return TextAnswerOut.from_orm_answer(t)

@router.put("/{attempt_id}/text-answers/{question_id}/grade", response_model=TextAnswerOut,
            dependencies=[Depends(require_roles("author", "admin"))])
def grade_text_answer(attempt_id: int, question_id: int, payload: TextAnswerGrade, db: Session = Depends(get_db)):
    t = quizzes.grade_text_answer(db, attempt_id, question_id, payload.is_correct,
                                  score=payload.score, feedback=payload.feedback)
    db.commit(); db.refresh(t)
    return TextAnswerOut.from_orm_answer(t)

@router.post("/{attempt_id}/complete", response_model=AttemptOut)
def complete(attempt_id: int, user: TokenData = Depends(require_roles("student", "admin")), db: Session = Depends(get_db)):
    _owned_attempt(db, attempt_id, user)
    a = quizzes.complete_attempt(db, attempt_id)
    db.commit(); db.refresh(a)
    return _out(a)
