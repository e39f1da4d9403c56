"""Campaign description analysis with a keyword fallback."""

from __future__ import annotations

import logging
from typing import Any, Callable, Union

from recurring_donations.exceptions import AnalyzerUnavailableError
from recurring_donations.models import CampaignAnalysis, UrgencyLevel

logger = logging.getLogger(__name__)

AnalyzerBackend = Callable[[str], Union[CampaignAnalysis, dict[str, Any]]]

DEFAULT_TAGS = ("nonprofit", "charity")
SUMMARY_EXCERPT_LENGTH = 100

# (keywords, tags, category or None, urgency or None), applied in order;
# later matches override the category.
KEYWORD_RULES: list[tuple[tuple[str, ...], tuple[str, ...], str | None, UrgencyLevel | None]] = [
    (("emergency", "disaster"), ("emergency", "disaster-relief"), "disaster-relief", UrgencyLevel.HIGH),
    (("food", "hunger"), ("food-security", "hunger-relief"), "food-security", None),
    (("water", "clean"), ("water", "sanitation"), "water-sanitation", None),
    (("education", "school"), ("education", "learning"), "education", None),
    (("health", "medical"), ("healthcare", "medical"), "healthcare", None),
    (("children", "kids"), ("children", "youth"), None, None),
]


def fallback_analysis(description: str) -> CampaignAnalysis:
    """Deterministic keyword-based analysis used when no backend answers.

    Parameters
    ----------
    description : str
        Free-text campaign description.

    Returns
    -------
    CampaignAnalysis
        Never has empty tags; defaults to ``("nonprofit", "charity")``.
    """
    lowered = description.lower()
    tags: list[str] = []
    category = "general"
    urgency = UrgencyLevel.MEDIUM

    for keywords, rule_tags, rule_category, rule_urgency in KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            tags.extend(rule_tags)
            if rule_category is not None:
                category = rule_category
            if rule_urgency is not None:
                urgency = rule_urgency

    summary = (
        f"Campaign focused on {category.replace('-', ' ', 1)}. "
        f"{description[:SUMMARY_EXCERPT_LENGTH]}..."
    )

    return CampaignAnalysis(
        tags=tuple(tags) if tags else DEFAULT_TAGS,
        summary=summary,
        category=category,
        urgency=urgency,
    )


class CampaignAnalyzer:
    """Front for a pluggable analysis backend.

    Any backend failure is absorbed: the keyword fallback answers instead,
    so callers never see an analyzer error.

    Parameters
    ----------
    backend : AnalyzerBackend | None
        Callable returning a ``CampaignAnalysis`` or a dict with ``tags``,
        ``summary``, ``category`` and ``urgency`` keys. ``None`` means the
        fallback is always used.
    """

    def __init__(self, backend: AnalyzerBackend | None = None) -> None:
        self._backend = backend

    @property
    def has_backend(self) -> bool:
        return self._backend is not None

    def analyze(self, description: str) -> CampaignAnalysis:
        if self._backend is None:
            return fallback_analysis(description)

        try:
            result = self._backend(description)
            if isinstance(result, CampaignAnalysis):
                return result
            return CampaignAnalysis.from_dict(result)
        except AnalyzerUnavailableError as exc:
            logger.warning("Campaign analysis unavailable (%s), using keyword fallback", exc)
        except Exception:
            logger.exception("Error analyzing campaign, using keyword fallback")
        return fallback_analysis(description)
