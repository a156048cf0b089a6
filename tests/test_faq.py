"""
tests/test_faq.py
FAQ library filter/sort and usage analytics.
"""

import pytest

from inbox.faq.analytics import (
    MINUTES_PER_RESPONSE,
    TOP_FAQ_LIMIT,
    analytics_to_dict,
    build_faq_analytics,
)
from inbox.faq.filter_sort import (
    SORT_ALPHABETICAL,
    SORT_RECENT,
    SORT_USAGE,
    collation_key,
    filter_and_sort,
    normalize_sort,
)
from inbox.models.record import FAQTemplate


def _faq(faq_id, question, answer="", keywords=None, category="general",
         use_count=0, created=None, is_active=True) -> FAQTemplate:
    return FAQTemplate(
        id            = faq_id,
        question      = question,
        answer        = answer,
        keywords      = keywords or [],
        category      = category,
        use_count     = use_count,
        created_at_ms = created,
        is_active     = is_active,
    )


@pytest.fixture
def library():
    return [
        _faq("f1", "What are your prices?", "Starts at $10", ["cost"], "pricing", 40, 1000),
        _faq("f2", "When do you ship?", "Within 2 days", ["delivery"], "shipping", 15, 3000),
        _faq("f3", "Can I get a refund?", "Yes, within 30 days", [], "refunds", 40, 2000),
        _faq("f4", "Do you offer discounts?", "Bulk pricing available", ["deal"], "pricing", 5, None),
    ]


# ── FILTER / SORT ────────────────────────────────────────────

class TestFilterAndSort:

    def test_default_is_recent_with_missing_timestamp_last(self, library):
        assert [t.id for t in filter_and_sort(library)] == ["f2", "f3", "f1", "f4"]

    def test_query_matches_question(self, library):
        assert [t.id for t in filter_and_sort(library, "SHIP")] == ["f2"]

    def test_query_matches_answer(self, library):
        assert [t.id for t in filter_and_sort(library, "bulk pricing")] == ["f4"]

    def test_query_matches_keyword(self, library):
        assert [t.id for t in filter_and_sort(library, "deliver")] == ["f2"]

    def test_category_filter_case_insensitive(self, library):
        assert {t.id for t in filter_and_sort(library, category="PRICING")} == {"f1", "f4"}

    def test_all_category_keeps_everything(self, library):
        assert len(filter_and_sort(library, category="all")) == 4

    def test_search_and_category_combine(self, library):
        # "pric" hits f1 (question) and f4 (answer); category narrows nothing further
        hits = filter_and_sort(library, "pric", "pricing", SORT_USAGE)
        assert [t.id for t in hits] == ["f1", "f4"]

    def test_usage_sort_is_stable_for_ties(self, library):
        # f1 and f3 both have 40 uses and keep input order
        assert [t.id for t in filter_and_sort(library, sort=SORT_USAGE)] == ["f1", "f3", "f2", "f4"]

    def test_recent_sort_is_stable_for_ties(self):
        templates = [_faq("a", "A", created=5), _faq("b", "B", created=5), _faq("c", "C", created=9)]
        assert [t.id for t in filter_and_sort(templates, sort=SORT_RECENT)] == ["c", "a", "b"]

    def test_alphabetical_sort(self):
        templates = [
            _faq("1", "banana"),
            _faq("2", "Apple"),
            _faq("3", "Éclair"),
            _faq("4", "apple"),
            _faq("5", "cherry"),
        ]
        ordered = filter_and_sort(templates, sort=SORT_ALPHABETICAL)
        assert [t.question for t in ordered] == ["apple", "Apple", "banana", "cherry", "Éclair"]

    def test_unknown_sort_falls_back_to_recent(self, library):
        assert filter_and_sort(library, sort="bogus") == filter_and_sort(library, sort=SORT_RECENT)

    def test_input_not_mutated(self, library):
        before = [t.id for t in library]
        filter_and_sort(library, "x", "pricing", SORT_ALPHABETICAL)
        assert [t.id for t in library] == before

    def test_no_match_is_empty(self, library):
        assert filter_and_sort(library, "teleport") == []


class TestSortHelpers:

    def test_normalize_sort(self):
        assert normalize_sort(" Usage ") == SORT_USAGE
        assert normalize_sort("") == SORT_RECENT
        assert normalize_sort(None) == SORT_RECENT

    def test_collation_key_ignores_accents_first(self):
        assert collation_key("éa") < collation_key("eb")

    def test_collation_key_lowercase_before_uppercase(self):
        assert collation_key("a") < collation_key("A") < collation_key("b")


# ── ANALYTICS ────────────────────────────────────────────────

class TestFAQAnalytics:

    def test_totals(self, library):
        library[3].is_active = False
        a = build_faq_analytics(library)
        assert a.total_templates == 4
        assert a.active_templates == 3
        assert a.total_auto_responses == 100
        assert a.time_saved_minutes == 100 * MINUTES_PER_RESPONSE

    def test_usage_by_category(self, library):
        a = build_faq_analytics(library)
        assert a.usage_by_category == {"pricing": 45, "shipping": 15, "refunds": 40}

    def test_top_faqs_ranked_and_capped(self):
        templates = [_faq(f"f{i}", f"Q{i}", use_count=i) for i in range(15)]
        a = build_faq_analytics(templates)
        assert len(a.top_faqs) == TOP_FAQ_LIMIT
        assert a.top_faqs[0].id == "f14"
        assert [t.use_count for t in a.top_faqs] == sorted((t.use_count for t in a.top_faqs), reverse=True)

    def test_empty_library(self):
        a = build_faq_analytics([])
        assert a.total_templates == 0
        assert a.top_faqs == []
        assert a.usage_by_category == {}
        assert a.generated_at.endswith("Z")

    def test_to_dict_is_plain_data(self, library):
        d = analytics_to_dict(build_faq_analytics(library))
        assert d["total_auto_responses"] == 100
        assert isinstance(d["top_faqs"][0], dict)
        assert set(d["top_faqs"][0]) == {"id", "question", "use_count", "category"}
        assert "answer" not in d["top_faqs"][0]


class TestIdempotence:

    @pytest.mark.parametrize("sort", [SORT_RECENT, SORT_USAGE, SORT_ALPHABETICAL])
    @pytest.mark.parametrize("query,category", [("", "all"), ("pric", "pricing"), ("you", "all")])
    def test_applying_twice_changes_nothing(self, library, sort, query, category):
        # ties on use_count (f1/f3) and created_at (a/b), plus missing timestamps
        templates = library + [
            _faq("a", "apple", use_count=40, created=2000),
            _faq("b", "Apple", use_count=15, created=2000),
            _faq("c", "banana", created=None),
        ]
        once = filter_and_sort(templates, query, category, sort)
        assert filter_and_sort(once, query, category, sort) == once
