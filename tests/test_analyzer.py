"""Tests for campaign analysis."""

import logging
from unittest.mock import MagicMock

import pytest

from recurring_donations.exceptions import AnalyzerUnavailableError
from recurring_donations.models import CampaignAnalysis, UrgencyLevel
from recurring_donations.services.analyzer import CampaignAnalyzer, fallback_analysis


class TestFallbackAnalysis:
    """Tests for the keyword fallback."""

    def test_no_keywords(self) -> None:
        """Unmatched descriptions get default tags and the general category."""
        analysis = fallback_analysis("Support our local arts center")

        assert analysis.tags == ("nonprofit", "charity")
        assert analysis.category == "general"
        assert analysis.urgency is UrgencyLevel.MEDIUM
        assert analysis.summary == "Campaign focused on general. Support our local arts center..."

    def test_emergency_is_high_urgency(self) -> None:
        """Emergency and disaster keywords raise urgency."""
        analysis = fallback_analysis("Disaster response after the storm")

        assert analysis.tags == ("emergency", "disaster-relief")
        assert analysis.category == "disaster-relief"
        assert analysis.urgency is UrgencyLevel.HIGH
        assert analysis.summary.startswith("Campaign focused on disaster relief. ")

    def test_rules_accumulate_and_last_category_wins(self) -> None:
        """Tags accumulate in rule order; later rules override the category."""
        analysis = fallback_analysis("Emergency FOOD and clean WATER for kids")

        assert analysis.tags == (
            "emergency",
            "disaster-relief",
            "food-security",
            "hunger-relief",
            "water",
            "sanitation",
            "children",
            "youth",
        )
        assert analysis.category == "water-sanitation"
        assert analysis.urgency is UrgencyLevel.HIGH

    def test_children_rule_keeps_category(self) -> None:
        """The children rule adds tags without a category."""
        analysis = fallback_analysis("Mentoring for children in need")

        assert analysis.tags == ("children", "youth")
        assert analysis.category == "general"

    def test_summary_excerpt_truncated(self) -> None:
        """Summary quotes at most 100 characters of the description."""
        description = "x" * 250
        analysis = fallback_analysis(description)

        assert analysis.summary == "Campaign focused on general. " + "x" * 100 + "..."

    def test_deterministic(self) -> None:
        """Same input, same output."""
        assert fallback_analysis("School meals") == fallback_analysis("School meals")


class TestCampaignAnalyzer:
    """Tests for CampaignAnalyzer."""

    def test_without_backend(self) -> None:
        """No backend means the fallback answers."""
        analyzer = CampaignAnalyzer()

        assert not analyzer.has_backend
        assert analyzer.analyze("Medical supplies") == fallback_analysis("Medical supplies")

    def test_backend_analysis_returned(self) -> None:
        """A backend CampaignAnalysis is returned unchanged."""
        expected = CampaignAnalysis(tags=("ai",), summary="Backend summary", category="x")
        analyzer = CampaignAnalyzer(MagicMock(return_value=expected))

        assert analyzer.has_backend
        assert analyzer.analyze("anything") is expected

    def test_backend_dict_coerced(self) -> None:
        """Dict responses are converted."""
        backend = MagicMock(
            return_value={"tags": ["a", "b"], "summary": "S", "category": "c", "urgency": "low"}
        )

        analysis = CampaignAnalyzer(backend).analyze("desc")

        backend.assert_called_once_with("desc")
        assert analysis.tags == ("a", "b")
        assert analysis.urgency is UrgencyLevel.LOW

    def test_unavailable_backend_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        """AnalyzerUnavailableError is logged as a warning and absorbed."""
        backend = MagicMock(side_effect=AnalyzerUnavailableError("no API key"))

        with caplog.at_level(logging.WARNING, logger="recurring_donations"):
            analysis = CampaignAnalyzer(backend).analyze("Hunger relief")

        assert analysis == fallback_analysis("Hunger relief")
        assert "keyword fallback" in caplog.text

    def test_unexpected_backend_error_falls_back(self) -> None:
        """Any backend exception yields the fallback."""
        backend = MagicMock(side_effect=TimeoutError("slow"))

        assert CampaignAnalyzer(backend).analyze("School") == fallback_analysis("School")

    def test_malformed_backend_response_falls_back(self) -> None:
        """A response that is neither analysis nor dict yields the fallback."""
        backend = MagicMock(return_value="not json")

        assert CampaignAnalyzer(backend).analyze("Water") == fallback_analysis("Water")
