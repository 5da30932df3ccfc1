import logging
import random
from typing import List, Optional, Sequence, Set
from quizgen.core.errors import InsufficientStockError, InvalidRequestError
from quizgen.models.domain import Difficulty, Quota

logger = logging.getLogger(__name__)

BUCKET_ORDER = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)

def add_until_unique(target: list, batch: Sequence, need: int, seen: Set[int]) -> int:
    """Append batch items in draw order, skipping ids already seen, until ``need`` were added."""
    added = 0
    for q in batch:
        if added >= need:
            break
        if q.id in seen:
            continue
        seen.add(q.id)
        target.append(q)
        added += 1
    return added

def assert_enough_stock(bank, category_ids: Sequence[int], total: int) -> int:
    stock = bank.count_questions_in_categories(category_ids)
    if stock < total:
        raise InsufficientStockError(have=stock, need=total)
    return stock

def draw_with_quota(bank, category_ids: Sequence[int], quota: Quota, total: int,
                    rng: Optional[random.Random] = None, overdraw: int = 2) -> List:
    """Draw ``total`` distinct questions from ``category_ids`` following ``quota``.

    Each difficulty bucket is over-drawn by ``overdraw`` to absorb duplicates;
    buckets that come up short are topped up afterwards from any difficulty.
    The result is shuffled. If supply shrank after the stock check the list
    can be shorter than ``total``; that is logged, not raised.
    """
    if not category_ids:
        raise InvalidRequestError("categoryIds must not be empty")
    if total <= 0:
        raise InvalidRequestError("total must be > 0")
    rng = rng or random.Random()

    stock = assert_enough_stock(bank, category_ids, total)
    logger.debug("Drawing %s (total=%d) from categories %s, stock=%d", quota, total, list(category_ids), stock)

    out: list = []
    seen: Set[int] = set()
    for difficulty in BUCKET_ORDER:
        need = quota.for_difficulty(difficulty)
        if need <= 0:
            continue
        batch = bank.draw_random_questions(category_ids, difficulty, need * overdraw)
        added = add_until_unique(out, batch, need, seen)
        logger.debug("%s: batch=%d need=%d added=%d", difficulty.value, len(batch), need, added)

    missing = total - len(out)
    if missing > 0:
        top_up = bank.draw_random_questions(category_ids, None, missing * overdraw, exclude_ids=sorted(seen))
        added = add_until_unique(out, top_up, missing, seen)
        logger.debug("top-up: batch=%d missing=%d added=%d", len(top_up), missing, added)

    rng.shuffle(out)
    if len(out) < total:
        logger.warning("Short sample from categories %s: got %d of %d questions", list(category_ids), len(out), total)
    return out[:total]
