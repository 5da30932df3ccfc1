import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select
from quizgen.core.errors import ConflictError, InvalidRequestError, NotFoundError
from quizgen.models.orm import Quiz, QuizQuestion, Attempt, AttemptSelectedChoice, AttemptTextAnswer, Choice
from quizgen.services.categories import get_required as get_category

logger = logging.getLogger(__name__)

def get_quiz(db: Session, quiz_id: int) -> Quiz:
    quiz = db.get(Quiz, quiz_id)
    if not quiz:
        raise NotFoundError(f"Quiz not found: {quiz_id}")
    return quiz

def create_quiz(db: Session, user_id: str, category_id: int) -> Quiz:
    if user_id is None:
        raise InvalidRequestError("userId must not be null")
    category = get_category(db, category_id)
    quiz = Quiz(user_id=str(user_id), category_id=category.id)
    db.add(quiz); db.flush()
    return quiz

def attach_questions(db: Session, quiz_id: int, question_ids: Iterable[int]) -> int:
    """Link questions to a quiz, skipping links that already exist. Returns how many were added."""
    wanted = list(dict.fromkeys(question_ids))
    if not wanted:
        return 0
    existing = set(db.scalars(select(QuizQuestion.question_id).where(
        QuizQuestion.quiz_id == quiz_id, QuizQuestion.question_id.in_(wanted))).all())
    added = 0
    for qid in wanted:
        if qid in existing:
            continue
        db.add(QuizQuestion(quiz_id=quiz_id, question_id=qid)); added += 1
    db.flush()
    return added

def question_ids_for_quiz(db: Session, quiz_id: int) -> List[int]:
    return list(db.scalars(select(QuizQuestion.question_id).where(QuizQuestion.quiz_id == quiz_id)).all())

def start_attempt(db: Session, quiz_id: int) -> Attempt:
    quiz = get_quiz(db, quiz_id)
    attempt = Attempt(quiz_id=quiz.id)
    db.add(attempt); db.flush()
    return attempt

def get_attempt(db: Session, attempt_id: int) -> Attempt:
    attempt = db.get(Attempt, attempt_id)
    if not attempt:
        raise NotFoundError(f"Attempt not found: {attempt_id}")
    return attempt

def submit_choices(db: Session, attempt_id: int, selections: Iterable[Tuple[int, int]]) -> Attempt:
    """Record (question_id, choice_id) selections for an open attempt."""
    attempt = get_attempt(db, attempt_id)
    if attempt.completed_at is not None:
        raise ConflictError(f"Cannot submit choices for completed attempt: {attempt_id}")
    linked = set(question_ids_for_quiz(db, attempt.quiz_id))
    for question_id, choice_id in selections:
        if question_id not in linked:
            raise InvalidRequestError(f"Question {question_id} is not part of quiz {attempt.quiz_id}")
        choice = db.get(Choice, choice_id)
        if not choice or choice.question_id != question_id:
            raise InvalidRequestError(f"Choice {choice_id} does not belong to question {question_id}")
        key = {"attempt_id": attempt_id, "question_id": question_id, "choice_id": choice_id}
        if db.get(AttemptSelectedChoice, key) is None:
            db.add(AttemptSelectedChoice(**key))
    db.flush()
    return attempt

def submit_text_answer(db: Session, attempt_id: int, question_id: int, answer_text: str) -> AttemptTextAnswer:
    """Record a free-text answer; it stays ungraded until ``grade_text_answer``."""
    attempt = get_attempt(db, attempt_id)
    if attempt.completed_at is not None:
        raise ConflictError(f"Cannot submit text answers for completed attempt: {attempt_id}")
    if answer_text is None or not answer_text.strip():
        raise InvalidRequestError("answerText must not be blank")
    if question_id not in set(question_ids_for_quiz(db, attempt.quiz_id)):
        raise InvalidRequestError(f"Question {question_id} is not part of quiz {attempt.quiz_id}")
    if db.get(AttemptTextAnswer, {"attempt_id": attempt_id, "question_id": question_id}) is not None:
        raise ConflictError(f"Text answer already exists for attempt {attempt_id} and question {question_id}")
    answer = AttemptTextAnswer(attempt_id=attempt_id, question_id=question_id, answer_text=answer_text.strip())
    db.add(answer); db.flush()
    return answer

def grade_text_answer(db: Session, attempt_id: int, question_id: int, is_correct: Optional[bool],
                      score: Optional[float] = None, feedback: Optional[str] = None) -> AttemptTextAnswer:
    answer = db.get(AttemptTextAnswer, {"attempt_id": attempt_id, "question_id": question_id})
    if answer is None:
        raise NotFoundError(f"Text answer not found for attempt {attempt_id} and question {question_id}")
    answer.is_correct = is_correct
    answer.score = score
    answer.feedback = feedback
    db.flush()
    logger.info("Graded text answer attempt=%s question=%s correct=%s", attempt_id, question_id, is_correct)
    return answer

def complete_attempt(db: Session, attempt_id: int) -> Attempt:
    """Close an attempt and mark its quiz completed, which makes it count as history."""
    attempt = get_attempt(db, attempt_id)
    if attempt.completed_at is not None:
        raise ConflictError(f"Attempt already completed: {attempt_id}")
    now = datetime.now(timezone.utc)
    attempt.completed_at = now
    get_quiz(db, attempt.quiz_id).completed_at = now
    db.flush()
    logger.info("Attempt %s completed (quiz %s)", attempt.id, attempt.quiz_id)
    return attempt
