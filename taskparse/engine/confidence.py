"""
Aggregate confidence for a parse result.

Formula:
    confidence = mean(confidence of every retained tag), 0.0 without tags
"""
from typing import List

import numpy as np

from taskparse.models.tag import ParsedTag


def aggregate_confidence(tags: List[ParsedTag]) -> float:
    """
    Mean confidence of the retained tags.

    Args:
        tags: Tags that survived conflict resolution.

    Returns:
        Value in [0.0, 1.0], rounded to 4 decimals.
    """
    if not tags:
        return 0.0
    mean = float(np.mean([t.confidence for t in tags]))
    return round(max(0.0, min(1.0, mean)), 4)
