"""
inbox/faq — FAQ library filtering, sorting and usage analytics.
"""

from inbox.faq.filter_sort import (
    ALL_CATEGORIES,
    FAQ_CATEGORIES,
    SORT_OPTIONS,
    collation_key,
    filter_and_sort,
)
from inbox.faq.analytics import FAQAnalytics, analytics_to_dict, build_faq_analytics

__all__ = [
    "ALL_CATEGORIES",
    "FAQ_CATEGORIES",
    "SORT_OPTIONS",
    "FAQAnalytics",
    "analytics_to_dict",
    "build_faq_analytics",
    "collation_key",
    "filter_and_sort",
]
