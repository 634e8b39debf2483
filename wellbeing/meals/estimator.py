"""Boundary to the image-to-calorie estimation service."""

import base64
import logging
import re
from typing import Optional, Protocol

from ..store.facade import WellbeingStore
from ..store.models import MEAL_SLOTS, DailyEntry

logger = logging.getLogger(__name__)


class CalorieEstimator(Protocol):
    """Vision service that answers with a calorie estimate as text."""

    async def estimate(self, image: bytes, mime_type: str) -> str: ...


def parse_calorie_text(text: Optional[str]) -> int:
    """
    Extract the first integer from an estimator reply.

    Returns:
        The number, or 0 when the reply contains no digits
    """
    match = re.search(r"\d+", (text or "").strip())
    return int(match.group(0)) if match else 0


def to_data_url(image: bytes, mime_type: str) -> str:
    """Encode image bytes as a data URL for storage."""
    return f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"


async def attach_meal_photo(
    store: WellbeingStore,
    slot: str,
    image: bytes,
    mime_type: str,
    estimator: CalorieEstimator,
) -> Optional[DailyEntry]:
    """
    Estimate calories for a meal photo and store both on today's entry.

    Nothing is stored when the estimate fails. There is no retry.

    Args:
        store: Store holding today's entry
        slot: "breakfast", "lunch" or "dinner"
        image: Raw image bytes
        mime_type: Image content type, e.g. "image/jpeg"
        estimator: Calorie estimation service

    Returns:
        The updated entry, or None if estimation failed
    """
    if slot not in MEAL_SLOTS:
        raise ValueError(f"Unknown meal slot: {slot}")

    logger.info(f"Estimating calories for {slot} ({len(image)} bytes)")

    try:
        reply = await estimator.estimate(image, mime_type)
    except Exception as e:
        logger.error(f"Error calculating calories for {slot}: {e}")
        return None

    calories = parse_calorie_text(reply)
    logger.info(f"  {slot}: ~{calories} kcal")

    return store.update_meal(
        slot, image=to_data_url(image, mime_type), calories=calories
    )
