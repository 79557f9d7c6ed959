"""
Product name matching for delivery note intake.

Scanned names are noisy ("Bananen bio 18kg", "TOM. TROS"); catalog names
are the shop's own. Matching is two-stage:

1. find_best_match: confident hit (exact, then containment) or None.
2. find_candidates: scored suggestions for the user to pick from.

All functions are pure over an in-memory catalog snapshot.
"""

from typing import Optional, Sequence
import structlog

from models.product import CatalogProduct
from utils.text_utils import normalize_product_name, tokenize

logger = structlog.get_logger(__name__)

MAX_CANDIDATES = 5

# Score weights
EXACT_SCORE = 100
CONTAINS_SCORE = 50
TOKEN_SCORE = 10
PREFIX_SCORE = 5
MIN_TOKEN_LENGTH = 3
PREFIX_LENGTH = 3


def score_candidate(scanned_name: str, product_name: str) -> int:
    """
    Score how well a catalog name fits a scanned name.

    Both containment directions are checked independently, so a name
    equal to the scan collects exact + both containment bonuses.

    Args:
        scanned_name: Name as read from the delivery note
        product_name: Catalog product name

    Returns:
        Integer score, 0 when nothing matches
    """
    scan = normalize_product_name(scanned_name)
    name = normalize_product_name(product_name)

    if not scan or not name:
        return 0

    score = 0

    if name == scan:
        score += EXACT_SCORE
    if scan in name:
        score += CONTAINS_SCORE
    if name in scan:
        score += CONTAINS_SCORE

    for token in tokenize(scan):
        if len(token) >= MIN_TOKEN_LENGTH and token in name:
            score += TOKEN_SCORE

    if name.startswith(scan[:PREFIX_LENGTH]):
        score += PREFIX_SCORE

    return score


def find_candidates(
    scanned_name: str,
    catalog: Sequence[CatalogProduct],
    limit: int = MAX_CANDIDATES
) -> list[CatalogProduct]:
    """
    Rank catalog products against a scanned name.

    Best-effort heuristic; false positives are expected and resolved by
    the user picking a suggestion.

    Args:
        scanned_name: Name as read from the delivery note
        catalog: Active products
        limit: Maximum suggestions (default 5)

    Returns:
        Products with score > 0, best first. Ties keep catalog order.
    """
    scored = [
        (score_candidate(scanned_name, product.name), product)
        for product in catalog
    ]
    scored = [(score, product) for score, product in scored if score > 0]

    # sorted() is stable, so equal scores keep catalog order
    scored.sort(key=lambda pair: pair[0], reverse=True)

    candidates = [product for _, product in scored[:limit]]

    logger.debug(
        "candidates_ranked",
        scanned_name=scanned_name,
        scored=len(scored),
        returned=len(candidates)
    )

    return candidates


def find_best_match(
    scanned_name: str,
    catalog: Sequence[CatalogProduct]
) -> Optional[CatalogProduct]:
    """
    Find a confident match for a scanned name.

    Order:
        1. Exact case-insensitive equality
        2. First product whose name contains the scan, or is contained in it

    Returns:
        Matching product, or None if the user has to choose
    """
    scan = normalize_product_name(scanned_name)
    if not scan:
        return None

    for product in catalog:
        if normalize_product_name(product.name) == scan:
            return product

    for product in catalog:
        name = normalize_product_name(product.name)
        if name and (scan in name or name in scan):
            return product

    return None
