"""Tests for the GitHub GraphQL fetch and minimize helpers."""

import threading
from unittest.mock import MagicMock

import pytest
from github import GithubException

from prtidy_core.gh.pull_request import (
    MINIMIZE_MUTATION,
    REVIEW_THREADS_QUERY,
    REVIEWS_QUERY,
    GithubGraphQLClient,
    fetch_pull_request_data,
    fetch_review_threads,
    fetch_reviews,
    minimize_review,
    paginate,
)
from prtidy_core.models import PageInfo

NO_MORE_PAGES = {"hasNextPage": False, "endCursor": None}


def _more_after(cursor):
    return {"hasNextPage": True, "endCursor": cursor}


def _connection(name, nodes, page_info=NO_MORE_PAGES):
    return {"repository": {"pullRequest": {name: {"pageInfo": page_info, "nodes": nodes}}}}


def _thread(thread_id, resolved=True):
    return {"id": thread_id, "isResolved": resolved, "comments": {"nodes": []}}


def _review(review_id, login="alice", created_at="2025-01-01T00:00:00Z"):
    return {"id": review_id, "author": {"login": login}, "createdAt": created_at, "isMinimized": False}


class FakeClient:
    """Answers GraphQL calls by connection name and cursor; safe to call from threads."""

    def __init__(self, threads=None, reviews=None, fail_on=None):
        empty = {None: ([], NO_MORE_PAGES)}
        self.pages = {"reviewThreads": threads or empty, "reviews": reviews or empty}
        self.fail_on = fail_on
        self.calls = []
        self._lock = threading.Lock()

    def graphql(self, query, variables):
        with self._lock:
            self.calls.append((query, dict(variables)))
        name = "reviewThreads" if "reviewThreads" in query else "reviews"
        if name == self.fail_on:
            raise GithubException(502, {"message": "Bad Gateway"}, None)
        nodes, page_info = self.pages[name][variables["cursor"]]
        return _connection(name, nodes, page_info)

    def calls_for(self, name):
        marker = "reviewThreads" if name == "reviewThreads" else "reviews("
        return [v for q, v in self.calls if marker in q]


class TestPaginate:
    def test_single_page(self):
        fetch_page = MagicMock(return_value=([{"id": 1}], PageInfo(False, None)))
        assert paginate(fetch_page) == [{"id": 1}]
        fetch_page.assert_called_once_with(None)

    def test_follows_cursors_in_order(self):
        fetch_page = MagicMock(
            side_effect=[
                ([{"id": 1}], PageInfo(True, "c1")),
                ([{"id": 2}], PageInfo(True, "c2")),
                ([{"id": 3}], PageInfo(False, "c3")),
            ]
        )

        assert [n["id"] for n in paginate(fetch_page)] == [1, 2, 3]
        assert [c.args[0] for c in fetch_page.call_args_list] == [None, "c1", "c2"]

    def test_stops_when_cursor_missing(self):
        fetch_page = MagicMock(return_value=([{"id": 1}], PageInfo(True, None)))
        assert paginate(fetch_page) == [{"id": 1}]
        fetch_page.assert_called_once_with(None)

    def test_stops_when_cursor_does_not_advance(self):
        fetch_page = MagicMock(
            side_effect=[
                ([{"id": 1}], PageInfo(True, "c1")),
                ([{"id": 2}], PageInfo(True, "c1")),
            ]
        )
        assert [n["id"] for n in paginate(fetch_page)] == [1, 2]
        assert fetch_page.call_count == 2

    def test_errors_propagate(self):
        fetch_page = MagicMock(side_effect=[([{"id": 1}], PageInfo(True, "c1")), GithubException(500, "boom", None)])
        with pytest.raises(GithubException):
            paginate(fetch_page)


class TestFetchReviewThreads:
    def test_paginates_across_pages(self):
        client = FakeClient(
            threads={
                None: ([_thread("t1")], _more_after("cursor1")),
                "cursor1": ([_thread("t2", resolved=False)], NO_MORE_PAGES),
            }
        )

        threads = fetch_review_threads(client, "o", "r", 1)

        assert [t.id for t in threads] == ["t1", "t2"]
        assert [c["cursor"] for c in client.calls_for("reviewThreads")] == [None, "cursor1"]

    def test_passes_owner_repo_and_number(self):
        client = FakeClient()
        fetch_review_threads(client, "my-org", "my-repo", 42)
        query, variables = client.calls[0]
        assert query == REVIEW_THREADS_QUERY
        assert variables == {"owner": "my-org", "repo": "my-repo", "number": 42, "cursor": None}


class TestFetchReviews:
    def test_paginates_across_pages(self):
        client = FakeClient(
            reviews={
                None: ([_review("r1")], _more_after("rcursor1")),
                "rcursor1": ([_review("r2", login="bob")], NO_MORE_PAGES),
            }
        )

        reviews = fetch_reviews(client, "o", "r", 1)

        assert [r.id for r in reviews] == ["r1", "r2"]
        assert reviews[1].author == "bob"
        assert [c["cursor"] for c in client.calls_for("reviews")] == [None, "rcursor1"]
        assert client.calls[0][0] == REVIEWS_QUERY


class TestFetchPullRequestData:
    def test_fetches_both_collections(self):
        client = FakeClient(
            threads={None: ([_thread("t1")], NO_MORE_PAGES)},
            reviews={None: ([_review("r1")], NO_MORE_PAGES)},
        )

        data = fetch_pull_request_data(client, "my-org", "my-repo", 42)

        assert [t.id for t in data.threads] == ["t1"]
        assert [r.id for r in data.reviews] == ["r1"]
        assert len(client.calls) == 2
        for _, variables in client.calls:
            assert variables["owner"] == "my-org"
            assert variables["repo"] == "my-repo"
            assert variables["number"] == 42

    def test_both_loops_run_to_completion(self):
        client = FakeClient(
            threads={
                None: ([_thread("t1")], _more_after("c1")),
                "c1": ([_thread("t2")], NO_MORE_PAGES),
            },
            reviews={
                None: ([_review("r1")], _more_after("rc1")),
                "rc1": ([_review("r2")], NO_MORE_PAGES),
            },
        )

        data = fetch_pull_request_data(client, "o", "r", 1)

        assert [t.id for t in data.threads] == ["t1", "t2"]
        assert [r.id for r in data.reviews] == ["r1", "r2"]

    @pytest.mark.parametrize("failing", ["reviewThreads", "reviews"])
    def test_failure_in_either_fetch_propagates(self, failing):
        client = FakeClient(fail_on=failing)
        with pytest.raises(GithubException):
            fetch_pull_request_data(client, "o", "r", 1)


class TestMinimizeReview:
    def test_sends_subject_id(self):
        client = MagicMock()
        minimize_review(client, "PRR_123")
        client.graphql.assert_called_once_with(MINIMIZE_MUTATION, {"subjectId": "PRR_123"})

    def test_uses_resolved_classifier(self):
        assert "classifier: RESOLVED" in MINIMIZE_MUTATION

    def test_propagates_errors(self):
        client = MagicMock()
        client.graphql.side_effect = GithubException(403, {"message": "Forbidden"}, None)
        with pytest.raises(GithubException):
            minimize_review(client, "PRR_123")


class TestGithubGraphQLClient:
    def test_returns_data_object(self):
        gh = MagicMock()
        gh.requester.graphql_query.return_value = ({}, {"data": {"viewer": {"login": "alice"}}})

        client = GithubGraphQLClient(gh)

        assert client.graphql("query { viewer { login } }", {}) == {"viewer": {"login": "alice"}}
        gh.requester.graphql_query.assert_called_once_with("query { viewer { login } }", {})

    def test_errors_from_requester_propagate(self):
        gh = MagicMock()
        gh.requester.graphql_query.side_effect = GithubException(401, {"message": "Bad credentials"}, None)
        with pytest.raises(GithubException):
            GithubGraphQLClient(gh).graphql("query { viewer { login } }", {})
