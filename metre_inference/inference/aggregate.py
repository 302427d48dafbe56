"""Aggregation of interpretation posteriors into summaries."""

from typing import Callable, Tuple

from ..core import Distribution, category_key_of


def time_average(distribution: Distribution) -> Distribution:
    """Mean of each key's series over all positions."""
    return distribution.average()


def position_slice(distribution: Distribution, position: int) -> Distribution:
    """Cross-sectional distribution at one position (negative counts from the end)."""
    return distribution.slice(position)


def marginalize_phase(
    distribution: Distribution,
    category_of: Callable[[str], str] = category_key_of,
) -> Distribution:
    """
    Collapse interpretations onto their categories.

    Each category's value is the mean over its phases; the category values
    are then renormalized to sum to 1.

    Args:
        distribution: Static distribution over interpretation keys
        category_of: Maps an interpretation key to its category key

    Returns:
        Normalized static distribution over category keys
    """
    return distribution.marginalize(category_of)


def most_probable(distribution: Distribution) -> Tuple[str, float]:
    """Key and probability of the most probable entry."""
    return distribution.argmax()
