"""Fixed sample datasets and canned queries for the simulated engines."""

from __future__ import annotations

import json
import time
from typing import Any

from .types import EngineMode, SampleQuery

MODE_TITLES: dict[EngineMode, str] = {
    EngineMode.SQL: "SQL Query Builder",
    EngineMode.DOCUMENT: "NoSQL Document Store",
    EngineMode.CACHE: "Cache Operations",
}

DOCUMENT_SAMPLES: tuple[SampleQuery, ...] = (
    SampleQuery(title="Get user profile", query="user:1"),
    SampleQuery(title="Get another user", query="user:2"),
    SampleQuery(title="List all keys", query="KEYS *"),
    SampleQuery(title="Store new data", query='SET user:3 {"name": "Charlie", "age": 16}'),
)

CACHE_SAMPLES: tuple[SampleQuery, ...] = (
    SampleQuery(title="Get session data", query="session:user1"),
    SampleQuery(title="Get recent posts", query="recent:posts"),
    SampleQuery(title="Get popular games", query="popular:games"),
    SampleQuery(title="Set cache value", query='SET temp:data "Hello Cache!"'),
)


def document_records() -> dict[str, dict[str, Any]]:
    """Return a fresh copy of the document store seed."""
    return {
        "user:1": {
            "name": "Alice Johnson",
            "age": 16,
            "profile": {
                "interests": ["coding", "gaming", "music"],
                "achievements": ["First Hackathon", "Code Challenge Winner"],
                "social": {
                    "friends": ["user:2", "user:3"],
                    "posts": 15,
                    "likes": 127,
                },
            },
        },
        "user:2": {
            "name": "Bob Smith",
            "age": 15,
            "profile": {
                "interests": ["sports", "coding", "movies"],
                "achievements": ["Team Captain", "Honor Roll"],
                "social": {
                    "friends": ["user:1", "user:4"],
                    "posts": 8,
                    "likes": 64,
                },
            },
        },
    }


def cache_entries(now_ms: int | None = None) -> dict[str, str]:
    """Return the cache seed; values are stored serialised, like a real cache."""
    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    return {
        "session:user1": json.dumps({"userId": 1, "loginTime": stamp, "lastActivity": stamp}),
        "recent:posts": json.dumps(["post1", "post2", "post3"]),
        "popular:games": json.dumps(["Minecraft", "Roblox", "Fortnite"]),
    }
