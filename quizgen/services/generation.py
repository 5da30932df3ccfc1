"""
Quiz generation: decide the difficulty split, sample questions and open the
first attempt on a (possibly new) quiz.
"""
import logging
import random
from typing import Optional
from quizgen.core.config import Settings, get_settings
from quizgen.core.errors import ConflictError, ForbiddenError, InvalidRequestError, ShortSampleError
from quizgen.models.domain import GenerationMode, GenerationRequest, GenerationResult, Quota
from quizgen.services import quota as quota_calc
from quizgen.services.mode_choice import decide_mode
from quizgen.services.sampler import draw_with_quota

logger = logging.getLogger(__name__)

class QuizGenerator:
    """Generation engine over a storage ``bank`` (see ``services.bank.QuizBank``)."""

    def __init__(self, bank, settings: Optional[Settings] = None, rng: Optional[random.Random] = None):
        self.bank = bank
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()

    def validate(self, req: GenerationRequest) -> int:
        if req.user_id is None or str(req.user_id).strip() == "":
            raise InvalidRequestError("userId required")
        if req.category_id is None:
            raise InvalidRequestError("categoryId required")
        if req.total is None or req.total <= 0:
            raise InvalidRequestError("total must be > 0")
        allowed = self.settings.GENERATION_ALLOWED_TOTALS
        if req.total not in allowed:
            raise InvalidRequestError(f"total must be one of {allowed}")
        if req.total > self.settings.GENERATION_MAX_TOTAL:
            raise InvalidRequestError(f"total must be <= {self.settings.GENERATION_MAX_TOTAL}")
        return req.total

    def _quota(self, req: GenerationRequest, total: int) -> tuple[GenerationMode, Quota]:
        mode = decide_mode(self.bank, req, self.settings)
        accuracy = None
        if mode == GenerationMode.ADAPTIVE:
            accuracy = self.bank.load_accuracy(req.user_id, req.category_id)
        q = quota_calc.compute_quota(
            total, mode, self.settings.base_ratios(),
            noise=self.settings.GENERATION_NOISE,
            alpha=self.settings.GENERATION_ADAPTIVE_ALPHA,
            accuracy=accuracy, rng=self.rng,
        )
        logger.info("user=%s category=%s mode=%s quota=%s accuracy=%s",
                    req.user_id, req.category_id, mode.value, q.as_dict(), accuracy)
        return mode, q

    def _check_supplied_quiz(self, req: GenerationRequest) -> None:
        quiz = self.bank.get_quiz(req.quiz_id)
        if quiz.user_id != str(req.user_id):
            raise ForbiddenError(f"Quiz {req.quiz_id} belongs to another user")
        if quiz.category_id != req.category_id:
            raise InvalidRequestError(f"Quiz {req.quiz_id} is for category {quiz.category_id}, not {req.category_id}")
        if quiz.completed_at is not None:
            raise ConflictError(f"Quiz already completed: {req.quiz_id}")

    def compute_quota(self, req: GenerationRequest) -> Quota:
        """Difficulty split a ``generate`` call would use right now (preview)."""
        total = self.validate(req)
        return self._quota(req, total)[1]

    def generate(self, req: GenerationRequest) -> GenerationResult:
        total = self.validate(req)
        if req.difficulty_filter is not None:
            logger.debug("difficulty filter %s requested; informational only", req.difficulty_filter)

        mode, q = self._quota(req, total)
        category_ids = self.bank.resolve_selection_ids(req.category_id)
        selected = draw_with_quota(self.bank, category_ids, q, total, rng=self.rng,
                                   overdraw=self.settings.GENERATION_OVERDRAW_FACTOR)
        if len(selected) < total and self.settings.GENERATION_SHORT_SAMPLE_POLICY == "strict":
            raise ShortSampleError(got=len(selected), need=total)

        quiz_id = req.quiz_id
        if quiz_id is None:
            quiz_id = self.bank.create_quiz(req.user_id, req.category_id)
        else:
            self._check_supplied_quiz(req)

        self.bank.attach_questions(quiz_id, [s.id for s in selected])
        attempt_id = self.bank.start_attempt(quiz_id)
        logger.info("Generated quiz %s attempt %s with %d questions for user %s",
                    quiz_id, attempt_id, len(selected), req.user_id)
        return GenerationResult(quiz_id=quiz_id, attempt_id=attempt_id, questions=selected, mode=mode, quota=q)
