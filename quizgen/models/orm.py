from datetime import datetime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import BigInteger, Integer, String, Text, Boolean, ForeignKey, DateTime, Float, Enum, func
from quizgen.models.domain import Difficulty, QuestionType

# SQLite only autoincrements INTEGER primary keys.
PK = BigInteger().with_variant(Integer, "sqlite")

class Base(DeclarativeBase): pass

class Category(Base):
    __tablename__ = "categories"
    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    area: Mapped[str | None] = mapped_column(String(100), nullable=True)
    name: Mapped[str] = mapped_column(String(150))
    slug: Mapped[str] = mapped_column(String(200), unique=True)
    parent_id: Mapped[int | None] = mapped_column(PK, ForeignKey("categories.id"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

class Question(Base):
    __tablename__ = "questions"
    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    type: Mapped[QuestionType] = mapped_column(Enum(QuestionType, native_enum=False, length=50))
    difficulty: Mapped[Difficulty] = mapped_column(Enum(Difficulty, native_enum=False, length=50), index=True)
    question: Mapped[str] = mapped_column(Text)
    category_id: Mapped[int] = mapped_column(PK, ForeignKey("categories.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    choices: Mapped[list["Choice"]] = relationship(back_populates="question", lazy="selectin", order_by="Choice.id")

class Choice(Base):
    __tablename__ = "choices"
    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(PK, ForeignKey("questions.id"), index=True)
    choice_text: Mapped[str] = mapped_column(Text)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    question: Mapped[Question] = relationship(back_populates="choices")

class Quiz(Base):
    __tablename__ = "quizzes"
    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    category_id: Mapped[int] = mapped_column(PK, ForeignKey("categories.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    quiz_id: Mapped[int] = mapped_column(PK, ForeignKey("quizzes.id"), primary_key=True)
    question_id: Mapped[int] = mapped_column(PK, ForeignKey("questions.id"), primary_key=True)

class Attempt(Base):
    __tablename__ = "attempts"
    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    quiz_id: Mapped[int] = mapped_column(PK, ForeignKey("quizzes.id"), index=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

class AttemptSelectedChoice(Base):
    __tablename__ = "attempt_selected_choices"
    attempt_id: Mapped[int] = mapped_column(PK, ForeignKey("attempts.id"), primary_key=True)
    question_id: Mapped[int] = mapped_column(PK, ForeignKey("questions.id"), primary_key=True)
    choice_id: Mapped[int] = mapped_column(PK, ForeignKey("choices.id"), primary_key=True)
    selected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

class AttemptTextAnswer(Base):
    __tablename__ = "attempt_text_answers"
    attempt_id: Mapped[int] = mapped_column(PK, ForeignKey("attempts.id"), primary_key=True)
    question_id: Mapped[int] = mapped_column(PK, ForeignKey("questions.id"), primary_key=True)
    answer_text: Mapped[str] = mapped_column(Text)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_correct: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    answered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
