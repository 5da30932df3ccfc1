"""
Difficulty split for a new quiz.

Weights for (easy, medium, hard) come from the configured base ratios, either
jittered (RANDOM) or blended with the user's weakness per difficulty
(ADAPTIVE), and are then turned into integer counts with the largest-remainder
method so the counts always add up to the requested total.
"""
import math
import random
from typing import Optional, Tuple
from quizgen.models.domain import Accuracy, GenerationMode, Quota

EPS = 1e-9

Weights = Tuple[float, float, float]

def normalize(weights: Weights) -> Weights:
    """Clamp negatives to 0 and scale to sum 1; all-zero input becomes equal thirds."""
    w = tuple(max(0.0, x) for x in weights)
    s = sum(w)
    if s <= EPS:
        return (1.0 / 3, 1.0 / 3, 1.0 / 3)
    return (w[0] / s, w[1] / s, w[2] / s)

def distribute_by_largest_remainder(weights: Weights, total: int) -> Quota:
    if total < 0:
        raise ValueError("total must be >= 0")
    we, wm, wh = normalize(weights)
    exact = [we * total, wm * total, wh * total]
    counts = [int(math.floor(x)) for x in exact]
    remainders = [x - c for x, c in zip(exact, counts)]
    remain = total - sum(counts)
    while remain > 0:
        # max() keeps the first of equal values, so ties go easy, medium, hard
        best = max(range(3), key=lambda i: remainders[i])
        counts[best] += 1
        remainders[best] = -1.0
        remain -= 1
    return Quota(easy=counts[0], medium=counts[1], hard=counts[2])

def random_weights(base: Weights, noise: float, rng: Optional[random.Random] = None) -> Weights:
    """Base ratios with independent uniform jitter of +/- noise/2 each."""
    rng = rng or random.Random()
    half = noise / 2.0
    return normalize(tuple(b + rng.uniform(-half, half) for b in base))

def weakness_weights(acc: Accuracy) -> Weights:
    """1 - accuracy per difficulty, normalized; perfect accuracy everywhere gives equal thirds."""
    clamp = lambda x: min(1.0, max(0.0, x))
    return normalize((1.0 - clamp(acc.easy), 1.0 - clamp(acc.medium), 1.0 - clamp(acc.hard)))

def adaptive_weights(base: Weights, acc: Accuracy, alpha: float) -> Weights:
    weak = weakness_weights(acc)
    return normalize(tuple(alpha * b + (1.0 - alpha) * w for b, w in zip(base, weak)))

def compute_quota(total: int, mode: GenerationMode, base: Weights, *, noise: float = 0.0,
                  alpha: float = 0.6, accuracy: Optional[Accuracy] = None,
                  rng: Optional[random.Random] = None) -> Quota:
    if mode == GenerationMode.ADAPTIVE:
        weights = adaptive_weights(base, accuracy or Accuracy(), alpha)
    else:
        weights = random_weights(base, noise, rng)
    return distribute_by_largest_remainder(weights, total)
