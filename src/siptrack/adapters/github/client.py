"""GitHub REST implementation of the repository port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Literal
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from siptrack.adapters.http_resilience import ResilientClient
from siptrack.domain.dates import normalize_datetime
from siptrack.domain.model import ChangeRequestState, FileChangeType
from siptrack.domain.ports import ChangedFile, ChangeRequest, RepositoryEntry

from .schema import ContentEntry, PullRequestFilePayload, PullRequestPayload

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from siptrack.config.github import GitHubConfig
    from siptrack.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

PAGE_SIZE = 100
MAX_FILE_PAGES = 30

_CONTENT_LIST = TypeAdapter(list[ContentEntry])
_PULL_LIST = TypeAdapter(list[PullRequestPayload])
_FILE_LIST = TypeAdapter(list[PullRequestFilePayload])


class GitHubAPIError(RuntimeError):
    """Raised when GitHub cannot be reached or answers with an unexpected payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """Read proposal documents and pull requests of one GitHub repository.

    One HTTP client is opened lazily inside the running event loop and reused until
    :meth:`aclose`; the reconciliation pipeline closes it after each run.
    """

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._http: ResilientClient | None = None

    @property
    def config(self) -> GitHubConfig:
        return self._config

    def browse_url(self, path: str) -> str:
        config = self._config
        return f"{config.repository_url}/blob/{quote(config.branch)}/{quote(path.strip('/'))}"

    def change_request_url(self, number: int) -> str:
        return f"{self._config.repository_url}/pull/{number}"

    async def list_directory(self, path: str) -> list[RepositoryEntry]:
        payload = await self._get_json(
            self._repo_path(f"contents/{quote(path.strip('/'))}"),
            params={"ref": self._config.branch},
        )
        if isinstance(payload, dict):
            # a path naming a single file
            payload = [payload]
        entries = self._validate(_CONTENT_LIST, payload, what=f"contents of {path}")
        return [
            RepositoryEntry(
                name=entry.name,
                path=entry.path,
                is_file=entry.type == "file",
                download_url=entry.download_url,
            )
            for entry in entries
            if entry.type in {"file", "dir"}
        ]

    async def fetch_bytes(self, url: str) -> bytes:
        response = await self._get(url)
        return response.content

    async def list_change_requests(
        self, state: Literal["open", "closed", "all"] = "all"
    ) -> list[ChangeRequest]:
        limit = self._config.max_change_requests
        change_requests: list[ChangeRequest] = []
        page = 1
        while len(change_requests) < limit:
            payload = await self._get_json(
                self._repo_path("pulls"),
                params={
                    "state": state,
                    "sort": "updated",
                    "direction": "desc",
                    "per_page": str(min(PAGE_SIZE, limit)),
                    "page": str(page),
                },
            )
            pulls = self._validate(_PULL_LIST, payload, what="pull request list")
            change_requests.extend(_to_change_request(pull) for pull in pulls)
            if len(pulls) < min(PAGE_SIZE, limit):
                break
            page += 1
        log.debug("Listed %s change requests", min(len(change_requests), limit))
        return change_requests[:limit]

    async def list_changed_files(self, number: int) -> list[ChangedFile]:
        files: list[ChangedFile] = []
        for page in range(1, MAX_FILE_PAGES + 1):
            payload = await self._get_json(
                self._repo_path(f"pulls/{number}/files"),
                params={"per_page": str(PAGE_SIZE), "page": str(page)},
            )
            entries = self._validate(_FILE_LIST, payload, what=f"files of pull request #{number}")
            files.extend(_to_changed_file(entry) for entry in entries)
            if len(entries) < PAGE_SIZE:
                break
        return files

    async def aclose(self) -> None:
        http, self._http = self._http, None
        if http is not None:
            await http.aclose()

    def _repo_path(self, suffix: str) -> str:
        return f"repos/{self._config.owner}/{self._config.repo}/{suffix}"

    def _client(self) -> ResilientClient:
        if self._http is None:
            self._http = self._client_factory(self._resilience)
        return self._http

    async def _get(self, url: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        try:
            response = await self._client().get(url, params=params)
        except httpx.HTTPError as exc:
            raise GitHubAPIError(f"GitHub request to {url} failed: {exc}") from exc
        if response.is_error:
            raise GitHubAPIError(
                f"GitHub answered {response.status_code} for {response.request.url}",
                status_code=response.status_code,
            )
        return response

    async def _get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> object:
        response = await self._get(url, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError(f"GitHub returned invalid JSON for {url}") from exc

    @staticmethod
    def _validate[T](adapter: TypeAdapter[T], payload: object, *, what: str) -> T:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            raise GitHubAPIError(f"Unexpected GitHub payload for {what}: {exc}") from exc


def _to_change_request(pull: PullRequestPayload) -> ChangeRequest:
    return ChangeRequest(
        number=pull.number,
        title=pull.title,
        state=ChangeRequestState(pull.state),
        created_at=normalize_datetime(pull.created_at) or pull.created_at,
        url=pull.html_url,
        body=pull.body,
        author=pull.user.login if pull.user else None,
        updated_at=normalize_datetime(pull.updated_at),
        merged_at=normalize_datetime(pull.merged_at),
    )


def _to_changed_file(entry: PullRequestFilePayload) -> ChangedFile:
    try:
        change_type = FileChangeType(entry.status)
    except ValueError:
        log.debug("Unknown file status %r for %s", entry.status, entry.path)
        change_type = FileChangeType.UNCHANGED
    return ChangedFile(path=entry.path, change_type=change_type, raw_url=entry.raw_url)


__all__ = ["GitHubAPIError", "GitHubClient"]
