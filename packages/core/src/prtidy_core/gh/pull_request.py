from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

from github import Auth, Github

from prtidy_core.models import PageInfo, PullRequestData, RawReview, Thread

logger = logging.getLogger(__name__)

REVIEW_THREADS_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      reviewThreads(first: 100, after: $cursor) {
        pageInfo { hasNextPage endCursor }
        nodes {
          id
          isResolved
          comments(first: 1) {
            nodes {
              author { login }
              pullRequestReview { id createdAt isMinimized }
            }
          }
        }
      }
    }
  }
}
"""

REVIEWS_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      reviews(first: 100, after: $cursor) {
        pageInfo { hasNextPage endCursor }
        nodes {
          id
          author { login }
          createdAt
          isMinimized
        }
      }
    }
  }
}
"""

MINIMIZE_MUTATION = """
mutation($subjectId: ID!) {
  minimizeComment(input: { subjectId: $subjectId, classifier: RESOLVED }) {
    minimizedComment { isMinimized }
  }
}
"""


class GraphQLClient(Protocol):
    def graphql(self, query: str, variables: dict[str, Any]) -> dict: ...


class GithubGraphQLClient:
    """Runs GraphQL documents through PyGithub's requester.

    ``graphql`` returns the ``data`` object of the response. GraphQL errors and
    HTTP failures raise ``github.GithubException``.
    """

    def __init__(self, gh: Github):
        self._requester = gh.requester

    def graphql(self, query: str, variables: dict[str, Any]) -> dict:
        _, response = self._requester.graphql_query(query, variables)
        return response.get("data") or {}


def get_client(token: str) -> GithubGraphQLClient:
    return GithubGraphQLClient(Github(auth=Auth.Token(token)))


def paginate(fetch_page: Callable[[str | None], tuple[list[dict], PageInfo]]) -> list[dict]:
    """Follow a cursor-paginated connection to the end.

    ``fetch_page`` is called with ``None`` first and then with each returned
    end cursor. Nodes are returned in fetch order. A page that claims more
    results without a new cursor ends the loop rather than refetching.
    """
    nodes: list[dict] = []
    cursor: str | None = None
    while True:
        page, page_info = fetch_page(cursor)
        nodes.extend(page)
        if not page_info.has_next_page:
            return nodes
        if not page_info.end_cursor or page_info.end_cursor == cursor:
            logger.warning("Stopping pagination: hasNextPage set but cursor did not advance (%r)", page_info.end_cursor)
            return nodes
        cursor = page_info.end_cursor


def _connection_page(
    client: GraphQLClient, query: str, connection: str, owner: str, repo: str, pr_number: int, cursor: str | None
) -> tuple[list[dict], PageInfo]:
    variables = {"owner": owner, "repo": repo, "number": pr_number, "cursor": cursor}
    data = client.graphql(query, variables)
    conn = data["repository"]["pullRequest"][connection]
    return [n for n in conn.get("nodes") or [] if n], PageInfo.from_node(conn.get("pageInfo"))


def fetch_review_threads(client: GraphQLClient, owner: str, repo: str, pr_number: int) -> list[Thread]:
    """Return every review thread on a PR, following pagination."""
    nodes = paginate(
        lambda cursor: _connection_page(
            client, REVIEW_THREADS_QUERY, "reviewThreads", owner, repo, pr_number, cursor
        )
    )
    logger.debug("Fetched %d review thread(s) for %s/%s#%d", len(nodes), owner, repo, pr_number)
    return [Thread.from_node(n) for n in nodes]


def fetch_reviews(client: GraphQLClient, owner: str, repo: str, pr_number: int) -> list[RawReview]:
    """Return every review on a PR, including ones without inline comments."""
    nodes = paginate(
        lambda cursor: _connection_page(client, REVIEWS_QUERY, "reviews", owner, repo, pr_number, cursor)
    )
    logger.debug("Fetched %d review(s) for %s/%s#%d", len(nodes), owner, repo, pr_number)
    return [RawReview.from_node(n) for n in nodes]


def fetch_pull_request_data(client: GraphQLClient, owner: str, repo: str, pr_number: int) -> PullRequestData:
    """Fetch review threads and reviews concurrently.

    Both pagination loops run to completion before this returns. A failure in
    either one is re-raised here.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        threads_future = pool.submit(fetch_review_threads, client, owner, repo, pr_number)
        reviews_future = pool.submit(fetch_reviews, client, owner, repo, pr_number)
        return PullRequestData(threads=threads_future.result(), reviews=reviews_future.result())


def minimize_review(client: GraphQLClient, subject_id: str) -> None:
    """Minimize a review or comment by node id, marking it as resolved."""
    client.graphql(MINIMIZE_MUTATION, {"subjectId": subject_id})
