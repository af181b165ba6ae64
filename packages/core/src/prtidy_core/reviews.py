"""Review grouping and the minimize-eligibility rule.

These functions are pure: they never call GitHub and never raise on malformed
data. Anything that cannot be attributed to an author and a review is dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from prtidy_core.models import RawReview, Review, Thread, ThreadSummary, parse_timestamp

logger = logging.getLogger(__name__)

# Reviews with an unparseable timestamp sort as the oldest.
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(review: Review) -> datetime:
    try:
        return parse_timestamp(review.created_at)
    except (TypeError, ValueError):
        logger.debug("Unparseable createdAt %r on review %s", review.created_at, review.review_id)
        return _EPOCH


def group_threads_by_review(threads: Iterable[Thread]) -> list[Review]:
    """Group review threads under the review their first comment belongs to.

    Threads without comments, or whose first comment has no author or no
    parent review, are skipped. The first thread seen for a review decides its
    author, timestamp and minimized flag. Reviews come back in order of first
    discovery, each with its threads in input order.
    """
    by_id: dict[str, Review] = {}

    for thread in threads:
        first = thread.first_comment
        if first is None or not first.author or first.review is None:
            continue

        review = by_id.get(first.review.id)
        if review is None:
            review = Review(
                review_id=first.review.id,
                author=first.author,
                created_at=first.review.created_at,
                is_minimized=first.review.is_minimized,
            )
            by_id[review.review_id] = review

        review.threads.append(ThreadSummary(thread_id=thread.id, is_resolved=thread.is_resolved))

    return list(by_id.values())


def build_review_list(threads: Iterable[Thread], raw_reviews: Iterable[RawReview]) -> list[Review]:
    """Merge thread-derived reviews with the bare review list.

    Reviews that produced threads keep their thread-derived record. Every other
    review with a known author is added with no threads, so a bare approval
    still counts as an author's latest review. Reviews from deleted accounts
    (no author) are dropped.
    """
    reviews = group_threads_by_review(threads)
    seen = {r.review_id for r in reviews}

    for raw in raw_reviews:
        if raw.id in seen or not raw.author:
            continue
        reviews.append(
            Review(
                review_id=raw.id,
                author=raw.author,
                created_at=raw.created_at,
                is_minimized=raw.is_minimized,
            )
        )
        seen.add(raw.id)

    return reviews


def partition_by_author(reviews: Iterable[Review]) -> dict[str, list[Review]]:
    by_author: dict[str, list[Review]] = {}
    for review in reviews:
        by_author.setdefault(review.author, []).append(review)
    return by_author


def newest_first(reviews: Iterable[Review]) -> list[Review]:
    """Sort reviews most recent first. Equal timestamps keep their input order."""
    return sorted(reviews, key=_created_key, reverse=True)


def is_author_allowed(author: str, allowed_users: Sequence[str]) -> bool:
    """An empty allow-list accepts everyone; otherwise match exactly."""
    return not allowed_users or author in allowed_users


KEEP_LATEST = "keep-latest"
MINIMIZE = "minimize"
ALREADY_MINIMIZED = "already-minimized"
UNRESOLVED = "unresolved"
NOT_ALLOWED = "not-allowed"


def classify_reviews(reviews: Iterable[Review], allowed_users: Sequence[str]) -> list[tuple[Review, str]]:
    """Pair every review with the decision taken for it.

    Reviews are grouped by author (in order of first appearance) and listed
    most recent first within each author.
    """
    decisions: list[tuple[Review, str]] = []

    for author, author_reviews in partition_by_author(reviews).items():
        ordered = newest_first(author_reviews)
        if not is_author_allowed(author, allowed_users):
            decisions.extend((r, NOT_ALLOWED) for r in ordered)
            continue

        decisions.append((ordered[0], KEEP_LATEST))
        for review in ordered[1:]:
            if review.is_minimized:
                decisions.append((review, ALREADY_MINIMIZED))
            elif not review.is_fully_resolved:
                decisions.append((review, UNRESOLVED))
            else:
                decisions.append((review, MINIMIZE))

    return decisions


def find_reviews_to_minimize(reviews: Iterable[Review], allowed_users: Sequence[str]) -> list[str]:
    """Return the ids of reviews that should be minimized.

    Rules, applied per author:
      1. Authors outside ``allowed_users`` are ignored (empty list = everyone).
      2. The most recent review is always kept visible.
      3. Older reviews are minimized only when every thread is resolved.
         A review with no threads qualifies once it has been superseded.
      4. Reviews that are already minimized are skipped.
    """
    return [r.review_id for r, decision in classify_reviews(reviews, allowed_users) if decision == MINIMIZE]
