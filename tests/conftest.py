"""
tests/conftest.py
Shared synthetic backend export — no real user data needed.
"""

import json

import pytest

SAMPLE_EXPORT = {
    "users": [
        {"uid": "me", "displayName": "Creator", "photoURL": "https://img/me.png"},
        {"uid": "alice", "displayName": "Alice", "photoURL": "https://img/alice.png"},
        {"uid": "bob", "displayName": "Bob"},
    ],
    "conversations": {
        "d-alice": {
            "type": "direct",
            "participantIds": ["me", "alice"],
            "lastMessageTimestamp": {"seconds": 1704067500, "nanoseconds": 0},
        },
        "d-bob": {
            "type": "direct",
            "participantIds": ["bob", "me"],
            "lastMessageTimestamp": 1704067800000,
        },
        "g-team": {
            "type": "group",
            "participantIds": ["me", "alice", "bob"],
            "groupName": "Launch Team",
            "lastMessageTimestamp": "2024-01-01T00:20:00Z",
            "archivedBy": {"me": True},
        },
        "g-other": {
            "type": "group",
            "participantIds": ["alice", "bob"],
            "groupName": "Not Mine",
            "lastMessageTimestamp": 1704067000000,
        },
    },
    "messages": [
        {"id": "m1", "conversationId": "d-alice", "senderId": "alice",
         "text": "What is your pricing?", "timestamp": 1704067200000},
        {"id": "m2", "conversationId": "d-alice", "senderId": "me",
         "text": "Pricing starts at $10", "timestamp": 1704067500000},
        {"id": "m3", "conversationId": "d-bob", "senderId": "bob",
         "text": "Collab idea for next week", "timestamp": 1704067800000},
        {"id": "m4", "conversationId": "g-team", "senderId": "bob",
         "text": "Launch pricing deck attached", "timestamp": 1704068400000},
        {"id": "m5", "conversationId": "g-other", "senderId": "bob",
         "text": "pricing gossip", "timestamp": 1704068500000},
    ],
    "faqTemplates": [
        {"id": "f1", "creatorId": "me", "question": "What are your prices?",
         "answer": "Starts at $10", "keywords": ["price", "cost"], "category": "pricing",
         "useCount": 12, "isActive": True, "createdAt": 1704000000000},
        {"id": "f2", "creatorId": "me", "question": "Do you ship abroad?",
         "answer": "Yes, worldwide", "keywords": ["shipping"], "category": "shipping",
         "useCount": 30, "isActive": False, "createdAt": 1704100000000},
    ],
    "opportunityScores": {"d-bob": 88, "d-alice": 45},
}


@pytest.fixture
def snapshot_data():
    return json.loads(json.dumps(SAMPLE_EXPORT))


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    path = tmp_path / "export.json"
    path.write_text(json.dumps(snapshot_data), encoding="utf-8")
    return path
