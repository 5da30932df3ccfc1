"""
Read side of a user's quiz history: completed-quiz counts and accuracy per
difficulty. Only quizzes with ``completed_at`` set count as history.
"""
from typing import Dict, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import select, func, case
from quizgen.models.domain import Accuracy, Difficulty
from quizgen.models.orm import Quiz, Attempt, AttemptSelectedChoice, AttemptTextAnswer, Choice, Question

UNCERTAIN = 0.5

def count_completed_quizzes(db: Session, user_id: str, category_id: int) -> int:
    return db.scalar(select(func.count(Quiz.id)).where(
        Quiz.user_id == str(user_id), Quiz.category_id == category_id, Quiz.completed_at.is_not(None))) or 0

def _choice_stats(db: Session, user_id: str, category_id: int):
    correct = func.sum(case((Choice.is_correct.is_(True), 1), else_=0))
    stmt = (
        select(Question.difficulty, correct, func.count())
        .select_from(Quiz)
        .join(Attempt, Attempt.quiz_id == Quiz.id)
        .join(AttemptSelectedChoice, AttemptSelectedChoice.attempt_id == Attempt.id)
        .join(Question, Question.id == AttemptSelectedChoice.question_id)
        .join(Choice, (Choice.id == AttemptSelectedChoice.choice_id) & (Choice.question_id == Question.id))
        .where(Quiz.user_id == str(user_id), Question.category_id == category_id, Quiz.completed_at.is_not(None))
        .group_by(Question.difficulty)
    )
    return db.execute(stmt).all()

def _text_stats(db: Session, user_id: str, category_id: int):
    correct = func.sum(case((AttemptTextAnswer.is_correct.is_(True), 1), else_=0))
    stmt = (
        select(Question.difficulty, correct, func.count())
        .select_from(Quiz)
        .join(Attempt, Attempt.quiz_id == Quiz.id)
        .join(AttemptTextAnswer, AttemptTextAnswer.attempt_id == Attempt.id)
        .join(Question, Question.id == AttemptTextAnswer.question_id)
        .where(Quiz.user_id == str(user_id), Question.category_id == category_id,
               Quiz.completed_at.is_not(None), AttemptTextAnswer.is_correct.is_not(None))
        .group_by(Question.difficulty)
    )
    return db.execute(stmt).all()

def load_accuracy(db: Session, user_id: str, category_id: int) -> Accuracy:
    """Correct/total per difficulty over completed quizzes; 0.5 where there is no data.

    Graded text answers count alongside selected choices; ungraded ones are ignored.
    """
    totals: Dict[Difficulty, Tuple[int, int]] = {d: (0, 0) for d in Difficulty}
    for difficulty, correct, total in list(_choice_stats(db, user_id, category_id)) + list(_text_stats(db, user_id, category_id)):
        if difficulty is None:
            continue
        c, t = totals[Difficulty(difficulty)]
        totals[Difficulty(difficulty)] = (c + int(correct or 0), t + int(total or 0))

    def ratio(d: Difficulty) -> float:
        c, t = totals[d]
        return UNCERTAIN if t == 0 else c / t

    return Accuracy(easy=ratio(Difficulty.EASY), medium=ratio(Difficulty.MEDIUM), hard=ratio(Difficulty.HARD))
