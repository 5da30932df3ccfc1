import os
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "testing")

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizgen.core.auth import create_token
from quizgen.core.config import Settings
from quizgen.core.database import get_db
from quizgen.core.errors import NotFoundError
from quizgen.main import app
from quizgen.models.domain import Accuracy, Difficulty
from quizgen.models.orm import Base


@dataclass
class FakeQuestion:
    id: int
    difficulty: Difficulty
    category_id: int = 1


@dataclass
class FakeQuiz:
    id: int
    user_id: str
    category_id: int
    completed_at: Optional[datetime] = None
    question_ids: List[int] = field(default_factory=list)


class FakeBank:
    """In-memory stand-in for QuizBank that records every call."""

    def __init__(self, questions: Optional[List[FakeQuestion]] = None, children: Optional[Dict[int, List[int]]] = None,
                 completed: int = 0, accuracy: Optional[Accuracy] = None, seed: int = 7, fixed_batches=None):
        self.questions = list(questions or [])
        self.children = children if children is not None else {1: []}
        self.completed = completed
        self.accuracy = accuracy or Accuracy()
        self.rng = random.Random(seed)
        self.fixed_batches = list(fixed_batches) if fixed_batches is not None else None
        self.calls: List[tuple] = []
        self.quizzes: Dict[int, FakeQuiz] = {}
        self.attempts: Dict[int, int] = {}

    def count_completed_quizzes(self, user_id, category_id):
        self.calls.append(("count_completed_quizzes", user_id, category_id))
        return self.completed

    def load_accuracy(self, user_id, category_id):
        self.calls.append(("load_accuracy", user_id, category_id))
        return self.accuracy

    def resolve_selection_ids(self, category_id):
        self.calls.append(("resolve_selection_ids", category_id))
        if category_id not in self.children:
            raise NotFoundError(f"Category not found: {category_id}")
        return sorted([category_id] + self.children[category_id])

    def count_questions_in_categories(self, category_ids):
        self.calls.append(("count_questions_in_categories", tuple(category_ids)))
        return sum(1 for q in self.questions if q.category_id in category_ids)

    def draw_random_questions(self, category_ids, difficulty, limit, exclude_ids=None):
        self.calls.append(("draw_random_questions", tuple(category_ids), difficulty, limit))
        if self.fixed_batches is not None:
            return self.fixed_batches.pop(0)[:limit]
        skip = set(exclude_ids or ())
        pool = [q for q in self.questions
                if q.category_id in category_ids and q.id not in skip
                and (difficulty is None or q.difficulty == difficulty)]
        return self.rng.sample(pool, min(limit, len(pool)))

    def get_quiz(self, quiz_id):
        self.calls.append(("get_quiz", quiz_id))
        if quiz_id not in self.quizzes:
            raise NotFoundError(f"Quiz not found: {quiz_id}")
        return self.quizzes[quiz_id]

    def create_quiz(self, user_id, category_id):
        self.calls.append(("create_quiz", user_id, category_id))
        quiz_id = len(self.quizzes) + 100
        self.quizzes[quiz_id] = FakeQuiz(id=quiz_id, user_id=str(user_id), category_id=category_id)
        return quiz_id

    def attach_questions(self, quiz_id, question_ids):
        self.calls.append(("attach_questions", quiz_id, list(question_ids)))
        linked = self.quizzes[quiz_id].question_ids
        linked.extend(q for q in question_ids if q not in linked)

    def start_attempt(self, quiz_id):
        self.calls.append(("start_attempt", quiz_id))
        attempt_id = len(self.attempts) + 500
        self.attempts[attempt_id] = quiz_id
        return attempt_id

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


def make_questions(easy: int, medium: int, hard: int, category_id: int = 1, start: int = 1) -> List[FakeQuestion]:
    out, qid = [], start
    for difficulty, n in ((Difficulty.EASY, easy), (Difficulty.MEDIUM, medium), (Difficulty.HARD, hard)):
        for _ in range(n):
            out.append(FakeQuestion(id=qid, difficulty=difficulty, category_id=category_id))
            qid += 1
    return out


@pytest.fixture
def make_settings():
    def factory(**overrides) -> Settings:
        return Settings(ENVIRONMENT="testing", **overrides)
    return factory


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool, future=True)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_header(user_id: str, *roles: str) -> dict:
    return {"Authorization": f"Bearer {create_token(user_id, list(roles))}"}
