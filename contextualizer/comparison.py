"""Population scaling and comparable-event phrasing for casualty counts."""

import logging
from typing import Iterable, Optional, Union

from .config import ComparisonConfig
from .models import ComparableEvent, Comparison
from .utils.formatting import format_count, multiplier_words, round_half_up

logger = logging.getLogger(__name__)

ANY_CATEGORY = "any"

# Fixed fraction vocabulary for counts below the approximate band
FRACTIONS = (
    (1 / 3, "one-third"),
    (1 / 2, "half"),
    (2 / 3, "two-thirds"),
    (3 / 4, "three-quarters"),
)


def scale_count(
    base: int,
    destination_population: int,
    source_population: int,
    scale_factor: float = 1.0,
) -> int:
    """Scale a count by the destination/source population ratio.

    The result is rounded half up and never drops to 0 for a base of at
    least 1.
    """
    if source_population <= 0:
        raise ValueError(f"source population must be positive, got {source_population}")
    value = round_half_up(base * destination_population / source_population * scale_factor)
    if base >= 1 and value < 1:
        return 1
    return value


def _event_order(event_id: Union[int, str]) -> tuple:
    """Ordering for tie-breaks: numeric ids by absolute value, then string ids."""
    if isinstance(event_id, int):
        return (0, abs(event_id), "")
    return (1, 0, str(event_id))


def find_comparable(
    count: int,
    events: Iterable[ComparableEvent],
    category: Optional[str] = ANY_CATEGORY,
) -> Optional[ComparableEvent]:
    """Find the event whose casualty count is closest to count.

    Ties are broken by the smaller event id.
    """
    candidates = [
        e
        for e in events
        if e.casualties > 0 and (category in (None, ANY_CATEGORY) or e.category == category)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda e: (abs(e.casualties - count), _event_order(e.id)))


class Comparator:
    """Phrases a scaled count relative to a comparable event."""

    def __init__(
        self,
        approximate_low: float = 0.85,
        approximate_high: float = 1.15,
        fraction_tolerance: float = 0.1,
    ):
        """
        Initialize the comparator.

        Args:
            approximate_low: Lowest ratio phrased as "approximately as many as".
            approximate_high: Highest ratio phrased as "approximately as many as".
            fraction_tolerance: Max distance from a fixed fraction to use it.
        """
        self.approximate_low = approximate_low
        self.approximate_high = approximate_high
        self.fraction_tolerance = fraction_tolerance

    @classmethod
    def from_config(cls, config: ComparisonConfig) -> "Comparator":
        return cls(
            approximate_low=config.approximate_low,
            approximate_high=config.approximate_high,
            fraction_tolerance=config.fraction_tolerance,
        )

    def phrase(self, count: int, event: ComparableEvent) -> Comparison:
        """Phrase count relative to event."""
        ratio = count / event.casualties
        approximate = f"approximately as many as {event.name}"

        if self.approximate_low <= ratio <= self.approximate_high:
            text = approximate
        elif ratio < self.approximate_low:
            value, word = min(FRACTIONS, key=lambda f: abs(f[0] - ratio))
            if abs(value - ratio) <= self.fraction_tolerance:
                text = f"{word} of {event.name}"
            else:
                text = f"a small fraction of {event.name}"
        else:
            multiplier = round_half_up(ratio)
            if multiplier <= 1:
                text = approximate
            else:
                text = f"{multiplier_words(multiplier)} times {event.name}"

        explanation = (
            f"{format_count(count)} compared with {format_count(event.casualties)} "
            f"in {event.name}"
        )
        if event.year:
            explanation += f" ({event.year})"

        return Comparison(phrase=text, explanation=explanation, event=event, ratio=ratio)

    def compare(
        self,
        count: int,
        events: Iterable[ComparableEvent],
        category: Optional[str] = ANY_CATEGORY,
    ) -> Optional[Comparison]:
        """Find the closest event and phrase the comparison.

        Returns None when the country has no event of the category.
        """
        event = find_comparable(count, events, category)
        if event is None:
            logger.debug(f"No comparable '{category}' event for count {count}")
            return None
        return self.phrase(count, event)
