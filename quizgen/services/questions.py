import logging
from typing import Iterable, List, Optional, Sequence
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from quizgen.core.errors import InvalidRequestError, NotFoundError
from quizgen.models.domain import Difficulty, QuestionType
from quizgen.models.orm import Question, Choice
from quizgen.services.categories import get_required as get_category

logger = logging.getLogger(__name__)

def count_questions_in_categories(db: Session, category_ids: Sequence[int]) -> int:
    if not category_ids:
        return 0
    return db.scalar(select(func.count(Question.id)).where(Question.category_id.in_(list(category_ids)))) or 0

def draw_random_questions(db: Session, category_ids: Sequence[int], difficulty: Optional[Difficulty], limit: int,
                          exclude_ids: Optional[Iterable[int]] = None) -> List[Question]:
    """Random batch of at most ``limit`` questions, optionally filtered by difficulty
    and skipping ``exclude_ids``."""
    if limit <= 0 or not category_ids:
        return []
    stmt = select(Question).where(Question.category_id.in_(list(category_ids)))
    if difficulty is not None:
        stmt = stmt.where(Question.difficulty == difficulty)
    if exclude_ids:
        stmt = stmt.where(Question.id.not_in(list(exclude_ids)))
    stmt = stmt.order_by(func.random()).limit(limit)
    return list(db.scalars(stmt).all())

def get_required(db: Session, question_id: int) -> Question:
    q = db.get(Question, question_id)
    if not q:
        raise NotFoundError(f"Question not found: {question_id}")
    return q

def create_question(db: Session, category_id: int, text: str, difficulty: Difficulty,
                    qtype: QuestionType = QuestionType.UNIQUE_CHOICE, choices: Optional[List[dict]] = None) -> Question:
    if not text or not text.strip():
        raise InvalidRequestError("question must not be blank")
    choices = choices or []
    if qtype != QuestionType.SHORT_ANSWER and not any(c.get("is_correct") for c in choices):
        raise InvalidRequestError("choice questions need at least one correct choice")
    if qtype in (QuestionType.UNIQUE_CHOICE, QuestionType.TRUE_FALSE) and sum(1 for c in choices if c.get("is_correct")) > 1:
        raise InvalidRequestError(f"{qtype.value} questions take exactly one correct choice")
    category = get_category(db, category_id)
    q = Question(type=qtype, difficulty=difficulty, question=text.strip(), category_id=category.id)
    db.add(q); db.flush()
    for c in choices:
        db.add(Choice(question_id=q.id, choice_text=c["text"], is_correct=bool(c.get("is_correct"))))
    db.flush()
    db.refresh(q)
    logger.debug("Created %s question %s in category %s", difficulty.value, q.id, category.id)
    return q
