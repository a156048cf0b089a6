"""
inbox/faq/analytics.py
FAQ library analytics for the creator dashboard.

Input: List[FAQTemplate] (snapshot of the creator's library).
Output: FAQAnalytics object suitable for JSON export.
Question text appears only in the top-FAQ list; answers never do.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List

from inbox.models.record import FAQTemplate

MINUTES_PER_RESPONSE = 2
TOP_FAQ_LIMIT        = 10


@dataclass
class TopFAQ:
    id: str
    question: str
    use_count: int
    category: str


@dataclass
class FAQAnalytics:
    total_templates: int = 0
    active_templates: int = 0
    total_auto_responses: int = 0
    time_saved_minutes: int = 0
    top_faqs: List[TopFAQ] = field(default_factory=list)
    usage_by_category: Dict[str, int] = field(default_factory=dict)
    generated_at: str = ''


def build_faq_analytics(templates: Iterable[FAQTemplate]) -> FAQAnalytics:
    """
    Summarise usage across a creator's FAQ templates.
    Time saved assumes MINUTES_PER_RESPONSE per automatic answer.
    """
    templates = list(templates)

    total_auto_responses = sum(t.use_count or 0 for t in templates)

    ranked = sorted(templates, key=lambda t: t.use_count or 0, reverse=True)
    top_faqs = [
        TopFAQ(
            id=t.id,
            question=t.question,
            use_count=t.use_count or 0,
            category=t.category,
        )
        for t in ranked[:TOP_FAQ_LIMIT]
    ]

    usage_by_category: Dict[str, int] = {}
    for t in templates:
        category = t.category or 'general'
        usage_by_category[category] = usage_by_category.get(category, 0) + (t.use_count or 0)

    return FAQAnalytics(
        total_templates=len(templates),
        active_templates=sum(1 for t in templates if t.is_active),
        total_auto_responses=total_auto_responses,
        time_saved_minutes=total_auto_responses * MINUTES_PER_RESPONSE,
        top_faqs=top_faqs,
        usage_by_category=usage_by_category,
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    )


def analytics_to_dict(analytics: FAQAnalytics) -> Dict:
    """Convert FAQAnalytics to a JSON-serializable dict."""
    def _dataclass_to_dict(obj):
        if hasattr(obj, "__dataclass_fields__"):
            return {k: _dataclass_to_dict(getattr(obj, k)) for k in obj.__dataclass_fields__}
        if isinstance(obj, list):
            return [_dataclass_to_dict(x) for x in obj]
        if isinstance(obj, dict):
            return {k: _dataclass_to_dict(v) for k, v in obj.items()}
        return obj

    return _dataclass_to_dict(analytics)
