"""
QuizBank binds the storage-facing operations the generation engine consumes
to one SQLAlchemy Session. The engine only talks to this object, so tests can
hand it an in-memory stand-in with the same methods.
"""
from typing import Iterable, List, Optional, Sequence
from sqlalchemy.orm import Session
from quizgen.models.domain import Accuracy, Difficulty
from quizgen.models.orm import Question, Quiz
from quizgen.services import categories, history, questions, quizzes

class QuizBank:
    def __init__(self, db: Session):
        self.db = db

    # history
    def count_completed_quizzes(self, user_id: str, category_id: int) -> int:
        return history.count_completed_quizzes(self.db, user_id, category_id)

    def load_accuracy(self, user_id: str, category_id: int) -> Accuracy:
        return history.load_accuracy(self.db, user_id, category_id)

    # category tree
    def resolve_selection_ids(self, category_id: int) -> List[int]:
        return categories.resolve_selection_ids(self.db, category_id)

    # question stock
    def count_questions_in_categories(self, category_ids: Sequence[int]) -> int:
        return questions.count_questions_in_categories(self.db, category_ids)

    def draw_random_questions(self, category_ids: Sequence[int], difficulty: Optional[Difficulty], limit: int,
                              exclude_ids: Optional[Iterable[int]] = None) -> List[Question]:
        return questions.draw_random_questions(self.db, category_ids, difficulty, limit, exclude_ids)

    # quiz / attempt records
    def get_quiz(self, quiz_id: int) -> Quiz:
        return quizzes.get_quiz(self.db, quiz_id)

    def create_quiz(self, user_id: str, category_id: int) -> int:
        return quizzes.create_quiz(self.db, user_id, category_id).id

    def attach_questions(self, quiz_id: int, question_ids: Iterable[int]) -> None:
        quizzes.attach_questions(self.db, quiz_id, question_ids)

    def start_attempt(self, quiz_id: int) -> int:
        return quizzes.start_attempt(self.db, quiz_id).id
