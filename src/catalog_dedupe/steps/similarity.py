from __future__ import annotations

from catalog_dedupe.models import ProductRecord, SimilarityResult
from catalog_dedupe.schema import DEFAULT_PROFILE, ProductField, ScoringProfile
from catalog_dedupe.steps.normalize import normalize_text


class ProductSimilarityScorer:
    """Weighted field comparison of two product records.

    Fields missing on either side are left out of both the weighted sum and
    the weight total, so two blank SKUs never count as a match.
    """

    def __init__(self, profile: ScoringProfile = DEFAULT_PROFILE) -> None:
        self._profile = profile

    @property
    def profile(self) -> ScoringProfile:
        return self._profile

    def compare(self, left: ProductRecord, right: ProductRecord) -> SimilarityResult:
        profile = self._profile
        field_scores: dict[str, float] = {}
        reasons: list[str] = []

        name_score = self._fuzzy(left.name, right.name)
        if name_score is not None:
            if profile.name_prefix_credit:
                name_score = max(
                    name_score,
                    token_prefix_similarity(normalize_text(left.name), normalize_text(right.name)),
                )
            field_scores[ProductField.NAME.value] = name_score
            if name_score > profile.name_strong_threshold:
                reasons.append(f"Very similar names ({_percent(name_score)}% match)")
            elif name_score > profile.name_weak_threshold:
                reasons.append(f"Similar names ({_percent(name_score)}% match)")

        sku_score = self._fuzzy(left.sku, right.sku)
        if sku_score is not None:
            field_scores[ProductField.SKU.value] = sku_score
            if sku_score > profile.sku_threshold:
                reasons.append(f"Similar SKUs ({_percent(sku_score)}% match)")

        brand_score = self._exact(left.brand_name, right.brand_name)
        if brand_score is not None:
            field_scores[ProductField.BRAND.value] = brand_score
            if brand_score == 1.0:
                reasons.append("Same brand")

        category_score = self._exact(left.category_name, right.category_name)
        if category_score is not None:
            field_scores[ProductField.CATEGORY.value] = category_score
            if category_score == 1.0:
                reasons.append("Same category")

        description_score = self._fuzzy(left.description, right.description)
        if description_score is not None:
            field_scores[ProductField.DESCRIPTION.value] = description_score
            if description_score > profile.description_threshold:
                reasons.append(f"Very similar descriptions ({_percent(description_score)}% match)")

        total = 0.0
        weight_sum = 0.0
        for field_name, sub_score in field_scores.items():
            weight = profile.weight_for(ProductField(field_name))
            total += weight * sub_score
            weight_sum += weight

        score = total / weight_sum if weight_sum > 0 else 0.0
        return SimilarityResult(
            score=min(1.0, max(0.0, score)),
            reasons=list(dict.fromkeys(reasons)),
            field_scores=field_scores,
        )

    @staticmethod
    def _fuzzy(left: str | None, right: str | None) -> float | None:
        left_text = normalize_text(left)
        right_text = normalize_text(right)
        if not left_text or not right_text:
            return None
        return string_similarity(left_text, right_text)

    @staticmethod
    def _exact(left: str | None, right: str | None) -> float | None:
        left_text = (left or "").strip().lower()
        right_text = (right or "").strip().lower()
        if not left_text or not right_text:
            return None
        return 1.0 if left_text == right_text else 0.0


_DEFAULT_SCORER = ProductSimilarityScorer()


def compare_products(
    left: ProductRecord,
    right: ProductRecord,
    profile: ScoringProfile | None = None,
) -> SimilarityResult:
    scorer = _DEFAULT_SCORER if profile is None else ProductSimilarityScorer(profile)
    return scorer.compare(left, right)


def string_similarity(left: str, right: str) -> float:
    """Edit-distance similarity in [0, 1]; 0.0 when either side is empty."""
    if not left or not right:
        return 0.0
    max_len = max(len(left), len(right))
    return (max_len - levenshtein(left, right)) / max_len


def token_prefix_similarity(left: str, right: str) -> float:
    """Credit for one normalized name being a whole-word prefix of the other.

    Returns 0.0 unless the shorter token list starts the longer one.
    """
    left_tokens = left.split()
    right_tokens = right.split()
    if not left_tokens or not right_tokens:
        return 0.0
    shorter, longer = sorted((left_tokens, right_tokens), key=len)
    if longer[: len(shorter)] != shorter:
        return 0.0
    return 0.5 + 0.5 * len(shorter) / len(longer)


def levenshtein(left: str, right: str) -> int:
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)

    prev = list(range(len(right) + 1))
    for i, c1 in enumerate(left, start=1):
        curr = [i]
        for j, c2 in enumerate(right, start=1):
            cost = 0 if c1 == c2 else 1
            curr.append(min(curr[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost))
        prev = curr
    return prev[-1]


def _percent(value: float) -> int:
    return int(value * 100 + 0.5)
