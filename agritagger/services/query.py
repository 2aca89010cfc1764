from __future__ import annotations

from typing import Iterable, List, Optional

from agritagger.domain.features import Feature

ALL_CROPS = "all"


def matches(feature: Feature, term: str, crop_filter: str, all_crops: str = ALL_CROPS) -> bool:
    """Return True when a feature passes the crop filter and the normalized search term."""
    if crop_filter != all_crops and feature.crop != crop_filter:
        return False
    if not term:
        return True
    return term in feature.name.lower() or term in feature.notes.lower()


def query_features(
    features: Iterable[Feature],
    search_text: Optional[str] = "",
    crop_filter: Optional[str] = ALL_CROPS,
    all_crops: str = ALL_CROPS,
) -> List[Feature]:
    """
    Filter features for the list panel.

    Args:
        features: Features in store order.
        search_text: Case-insensitive substring matched against name or notes.
        crop_filter: A crop name, or the ``all_crops`` sentinel.
        all_crops: Sentinel value that disables the crop filter.

    Returns:
        Matching features, in the order given.
    """
    term = (search_text or "").strip().lower()
    crop = crop_filter if crop_filter else all_crops
    return [feature for feature in features if matches(feature, term, crop, all_crops)]
