from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import pytest

from siptrack.adapters.github import GitHubAPIError, GitHubClient
from siptrack.adapters.http_resilience import ResilientClient
from siptrack.config import GitHubConfig, default_resilience_config
from siptrack.domain.model import ChangeRequestState, FileChangeType
from siptrack.domain.ports import RepositoryClient

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from siptrack.config import ResilienceConfig


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            headers=dict(resilience.default_headers or {}),
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


def _config(*, max_change_requests: int = 100, token: str | None = None) -> GitHubConfig:
    return GitHubConfig(
        owner="example",
        repo="sips",
        resilience=default_resilience_config(token=token, http_cache=False),
        max_change_requests=max_change_requests,
    )


def _pull(number: int, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "number": number,
        "title": f"SIP-{number}: something",
        "body": "",
        "state": "open",
        "html_url": f"https://github.com/example/sips/pull/{number}",
        "user": {"login": "octocat"},
        "created_at": "2024-01-02T03:04:05Z",
        "updated_at": "2024-01-03T00:00:00Z",
        "merged_at": None,
    }
    payload.update(overrides)
    return payload


def _run[T](client: GitHubClient, operation: Callable[[GitHubClient], Awaitable[T]]) -> T:
    async def runner() -> T:
        try:
            return await operation(client)
        finally:
            await client.aclose()

    return asyncio.run(runner())


def test_client_satisfies_repository_port() -> None:
    assert isinstance(GitHubClient(config=_config()), RepositoryClient)


def test_links() -> None:
    client = GitHubClient(config=_config())

    assert (
        client.browse_url("sips/sip-1.md")
        == "https://github.com/example/sips/blob/main/sips/sip-1.md"
    )
    assert client.change_request_url(5) == "https://github.com/example/sips/pull/5"


def test_list_directory_maps_entries() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {
                    "name": "sip-1.md",
                    "path": "sips/sip-1.md",
                    "type": "file",
                    "download_url": "https://raw.example/sip-1.md",
                    "sha": "abc",
                },
                {"name": "withdrawn", "path": "sips/withdrawn", "type": "dir", "download_url": None},
                {"name": "link", "path": "sips/link", "type": "symlink", "download_url": None},
            ],
        )

    client = GitHubClient(
        config=_config(token="secret"), client_factory=_make_client_factory(handler)
    )

    entries = _run(client, lambda c: c.list_directory("sips"))

    assert [(entry.name, entry.is_file) for entry in entries] == [
        ("sip-1.md", True),
        ("withdrawn", False),
    ]
    assert seen[0].url.path == "/repos/example/sips/contents/sips"
    assert seen[0].url.params["ref"] == "main"
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_list_change_requests_paginates_and_caps() -> None:
    pages: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        pages.append(request.url.params["per_page"])
        start = (page - 1) * 100 + 1
        count = 100 if page == 1 else 30
        return httpx.Response(200, json=[_pull(number) for number in range(start, start + count)])

    client = GitHubClient(
        config=_config(max_change_requests=120), client_factory=_make_client_factory(handler)
    )

    change_requests = _run(client, lambda c: c.list_change_requests())

    assert len(change_requests) == 120
    assert pages == ["100", "100"]
    first = change_requests[0]
    assert first.state is ChangeRequestState.OPEN
    assert first.author == "octocat"
    assert first.body is None
    assert first.created_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert first.url == "https://github.com/example/sips/pull/1"


def test_merged_pull_request() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[_pull(9, state="closed", merged_at="2024-02-01T00:00:00Z", user=None, title=None)],
        )

    client = GitHubClient(config=_config(), client_factory=_make_client_factory(handler))

    (change_request,) = _run(client, lambda c: c.list_change_requests())

    assert change_request.is_merged
    assert change_request.author is None
    assert change_request.title == ""


def test_list_changed_files_maps_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/example/sips/pulls/7/files"
        return httpx.Response(
            200,
            json=[
                {"filename": "sips/sip-7.md", "status": "modified", "raw_url": "https://raw/a"},
                {"filename": "sips/old.md", "status": "removed", "raw_url": ""},
                {"filename": "sips/odd.md", "status": "mystery"},
            ],
        )

    client = GitHubClient(config=_config(), client_factory=_make_client_factory(handler))

    files = _run(client, lambda c: c.list_changed_files(7))

    assert [(changed.path, changed.change_type, changed.raw_url) for changed in files] == [
        ("sips/sip-7.md", FileChangeType.MODIFIED, "https://raw/a"),
        ("sips/old.md", FileChangeType.REMOVED, None),
        ("sips/odd.md", FileChangeType.UNCHANGED, None),
    ]


def test_fetch_bytes_returns_content() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "raw.githubusercontent.com"
        return httpx.Response(200, content=b"---\nsip: 1\n---\n")

    client = GitHubClient(config=_config(), client_factory=_make_client_factory(handler))

    raw = _run(
        client, lambda c: c.fetch_bytes("https://raw.githubusercontent.com/example/sips/main/a.md")
    )

    assert raw.startswith(b"---")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"message": "Not Found"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"unexpected": "shape"}),
    ],
)
def test_errors_are_wrapped(response: httpx.Response) -> None:
    client = GitHubClient(
        config=_config(), client_factory=_make_client_factory(lambda _request: response)
    )

    with pytest.raises(GitHubAPIError):
        _run(client, lambda c: c.list_directory("sips"))


def test_transport_errors_are_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = GitHubClient(config=_config(), client_factory=_make_client_factory(handler))

    with pytest.raises(GitHubAPIError):
        _run(client, lambda c: c.list_change_requests())
