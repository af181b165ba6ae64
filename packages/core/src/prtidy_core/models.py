"""Pull request review data models.

The raw types (Comment, Thread, RawReview) mirror the GraphQL node shapes and
are parsed leniently: a missing or null sub-object becomes None rather than
raising, so malformed data is excluded downstream instead of failing a run.
ThreadSummary and Review are the assembled shapes the decision logic uses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by the GitHub API.

    Naive values are taken to be UTC so every parsed instant is comparable.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _login(node: dict | None) -> str | None:
    return (node or {}).get("login")


@dataclass(frozen=True)
class ReviewRef:
    """The ``pullRequestReview`` back-reference carried by a thread comment."""

    id: str
    created_at: str
    is_minimized: bool = False

    @classmethod
    def from_node(cls, node: dict | None) -> ReviewRef | None:
        if not node or not node.get("id"):
            return None
        return cls(
            id=node["id"],
            created_at=node.get("createdAt", ""),
            is_minimized=bool(node.get("isMinimized", False)),
        )


@dataclass(frozen=True)
class Comment:
    author: str | None
    review: ReviewRef | None

    @classmethod
    def from_node(cls, node: dict) -> Comment:
        return cls(author=_login(node.get("author")), review=ReviewRef.from_node(node.get("pullRequestReview")))


@dataclass(frozen=True)
class Thread:
    """A review thread. Only the first comment determines attribution."""

    id: str
    is_resolved: bool
    comments: list[Comment] = field(default_factory=list)

    @property
    def first_comment(self) -> Comment | None:
        return self.comments[0] if self.comments else None

    @classmethod
    def from_node(cls, node: dict) -> Thread:
        comment_nodes = (node.get("comments") or {}).get("nodes") or []
        return cls(
            id=node["id"],
            is_resolved=bool(node.get("isResolved", False)),
            comments=[Comment.from_node(c or {}) for c in comment_nodes],
        )


@dataclass(frozen=True)
class RawReview:
    """A bare review record from the ``reviews`` connection."""

    id: str
    author: str | None
    created_at: str
    is_minimized: bool = False

    @classmethod
    def from_node(cls, node: dict) -> RawReview:
        return cls(
            id=node["id"],
            author=_login(node.get("author")),
            created_at=node.get("createdAt", ""),
            is_minimized=bool(node.get("isMinimized", False)),
        )


@dataclass(frozen=True)
class ThreadSummary:
    thread_id: str
    is_resolved: bool


@dataclass
class Review:
    """A review as seen by the minimize logic, with its inline threads attached."""

    review_id: str
    author: str
    created_at: str
    is_minimized: bool
    threads: list[ThreadSummary] = field(default_factory=list)

    @property
    def is_fully_resolved(self) -> bool:
        # A review without inline threads (e.g. a bare approval) counts as resolved.
        return all(t.is_resolved for t in self.threads)


@dataclass(frozen=True)
class PageInfo:
    has_next_page: bool
    end_cursor: str | None = None

    @classmethod
    def from_node(cls, node: dict | None) -> PageInfo:
        node = node or {}
        return cls(has_next_page=bool(node.get("hasNextPage", False)), end_cursor=node.get("endCursor"))


@dataclass
class PullRequestData:
    """Both paginated collections for a PR, fully materialized."""

    threads: list[Thread] = field(default_factory=list)
    reviews: list[RawReview] = field(default_factory=list)
