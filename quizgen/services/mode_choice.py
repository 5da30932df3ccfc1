import logging
from quizgen.core.config import Settings
from quizgen.models.domain import GenerationMode, GenerationRequest

logger = logging.getLogger(__name__)

def decide_mode(bank, req: GenerationRequest, settings: Settings) -> GenerationMode:
    """Explicit override wins; otherwise ADAPTIVE once the user has enough completed quizzes here."""
    if req.mode_override is not None:
        return GenerationMode(req.mode_override)
    required = settings.GENERATION_MIN_QUIZZES_FOR_ADAPTIVE
    completed = bank.count_completed_quizzes(req.user_id, req.category_id)
    mode = GenerationMode.ADAPTIVE if completed >= required else GenerationMode.RANDOM
    logger.debug("user=%s category=%s completed=%d required=%d -> %s",
                 req.user_id, req.category_id, completed, required, mode.value)
    return mode
