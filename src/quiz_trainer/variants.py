"""Variant partitioning of subject question banks.

Subjects whose bank is not pre-tagged with variant numbers get one generated
here. The partition is derived from a seeded shuffle keyed on the subject id,
so the same bank always yields the same variants and completed-variant
records stay meaningful across restarts without storing the partition.
"""
import dataclasses
import logging

from quiz_trainer.models import Subject, VariantSet
from quiz_trainer.rng import seeded_shuffle, string_to_seed

logger = logging.getLogger(__name__)

# A leftover block larger than this becomes its own, shorter variant;
# otherwise it is folded into the last full variant.
REMAINDER_THRESHOLD = 20
DEFAULT_QUESTIONS_PER_VARIANT = 40

_VARIANT_CACHE: dict[str, VariantSet] = {}


def generate_variants_from_flat(
    questions,
    questions_per_variant: int = DEFAULT_QUESTIONS_PER_VARIANT,
    subject_id: str = "default",
) -> dict:
    """Split a flat question list into numbered variants.

    Args:
        questions: Ordered sequence of Question.
        questions_per_variant: Target variant size (> 0).
        subject_id: Stable identifier the shuffle seed is derived from.

    Returns:
        Dict of variant number (1-based) -> list of Question with
        ids rewritten to "<variant>-<position>" and variant stamped.
    """
    if questions_per_variant <= 0:
        raise ValueError("questions_per_variant must be positive")
    total = len(questions)
    full_variants = total // questions_per_variant
    remainder = total % questions_per_variant

    shuffled = seeded_shuffle(questions, string_to_seed(subject_id + "_variants"))

    extra_variant = remainder > REMAINDER_THRESHOLD
    if extra_variant:
        num_variants = full_variants + 1
    else:
        num_variants = max(1, full_variants)

    variants = {}
    for i in range(num_variants):
        number = i + 1
        start = i * questions_per_variant
        if i == num_variants - 1:
            end = total
        else:
            end = (i + 1) * questions_per_variant
        variants[number] = [
            dataclasses.replace(q, id=f"{number}-{pos + 1}", variant=number)
            for pos, q in enumerate(shuffled[start:end])
        ]
    return variants


def _variants_from_tags(subject: Subject) -> dict:
    numbers = sorted({q.variant for q in subject.data if q.variant is not None})
    return {n: [q for q in subject.data if q.variant == n] for n in numbers}


def build_variant_set(subject: Subject) -> VariantSet:
    if subject.has_variants:
        by_variant = _variants_from_tags(subject)
    else:
        by_variant = generate_variants_from_flat(
            subject.data, subject.questions_per_variant, subject.id,
        )
    return VariantSet(
        variant_numbers=sorted(by_variant),
        questions_by_variant=by_variant,
        total_questions=len(subject.data),
    )


def get_variant_set(subject: Subject) -> VariantSet:
    """Memoized build_variant_set, one entry per subject id for the process lifetime."""
    cached = _VARIANT_CACHE.get(subject.id)
    if cached is None:
        cached = build_variant_set(subject)
        _VARIANT_CACHE[subject.id] = cached
        logger.debug(
            "Built %d variants for subject %s", len(cached.variant_numbers), subject.id,
        )
    return cached


def clear_variant_cache() -> None:
    _VARIANT_CACHE.clear()


def variant_key(selector) -> str:
    """Storage key for a variant selector: variant_<N>, marathon or errors."""
    if selector in ("marathon", "errors"):
        return selector
    if isinstance(selector, str):
        raise ValueError(f"Unknown variant selector: {selector!r}")
    return f"variant_{int(selector)}"
