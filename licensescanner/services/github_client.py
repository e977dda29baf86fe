# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/github_client.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

GitHub REST client authenticated as a GitHub App installation.

Authentication follows the GitHub App flow:

1. sign a short-lived RS256 JWT with the app's private key;
2. check it against ``GET /app`` (yields the app's name and slug);
3. exchange it for an installation access token scoped to the organization.

All later requests use the installation token.
"""

# Standard
import time
from typing import Any, Dict, List, Optional

# Third-Party
import httpx
import jwt  # PyJWT
import orjson

# First-Party
from licensescanner.errors import AuthenticationError
from licensescanner.models import DependencyGraphDocument, GitHubAppInfo, IssueComment, RepositoryRef
from licensescanner.services.http_client_service import get_http_client
from licensescanner.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"
PAGE_SIZE = 100

# GitHub rejects app JWTs valid for more than ten minutes; iat is backdated for clock drift.
JWT_CLOCK_DRIFT_SECONDS = 60
JWT_LIFETIME_SECONDS = 540

# Organization-wide community health repository, never scanned.
COMMUNITY_HEALTH_REPOSITORY = ".github"


def create_app_jwt(app_id: str, private_key: str, now: Optional[int] = None) -> str:
    """Sign a GitHub App JWT.

    Args:
        app_id: GitHub App identifier (``iss`` claim).
        private_key: PEM encoded RSA private key.
        now: Current UNIX time; defaults to ``time.time()``.

    Returns:
        str: The encoded JWT.
    """
    issued_at = int(now if now is not None else time.time())
    payload = {
        "iat": issued_at - JWT_CLOCK_DRIFT_SECONDS,
        "exp": issued_at + JWT_LIFETIME_SECONDS,
        "iss": str(app_id),
    }
    return jwt.encode(payload, private_key, algorithm="RS256")


class GitHubClient:
    """Thin async wrapper over the GitHub REST endpoints the scanner uses."""

    def __init__(self, api_url: str = "https://api.github.com", client: Optional[httpx.AsyncClient] = None, token: Optional[str] = None) -> None:
        """Initialize the client.

        Args:
            api_url: GitHub REST API base URL.
            client: HTTP client to use; the shared client when omitted.
            token: Installation access token, if already obtained.
        """
        self.api_url = api_url.rstrip("/")
        self._client = client
        self._token = token
        self.app: Optional[GitHubAppInfo] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or the shared one.

        Returns:
            httpx.AsyncClient: client used for API requests.
        """
        if self._client is None:
            self._client = await get_http_client()
        return self._client

    def _headers(self, bearer: Optional[str] = None) -> Dict[str, str]:
        """Build request headers.

        Args:
            bearer: Token overriding the installation token.

        Returns:
            Dict[str, str]: headers for a GitHub API call.
        """
        headers = {"Accept": "application/vnd.github+json", "X-GitHub-Api-Version": GITHUB_API_VERSION}
        token = bearer or self._token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _url(self, path_or_url: str) -> str:
        """Resolve an API path against the base URL.

        Args:
            path_or_url: ``/path`` or an absolute URL (pagination links).

        Returns:
            str: absolute URL.
        """
        if path_or_url.startswith("http://") or path_or_url.startswith("https://"):
            return path_or_url
        return f"{self.api_url}{path_or_url}"

    async def request(self, method: str, path: str, bearer: Optional[str] = None, **kwargs: Any) -> httpx.Response:
        """Send a request and raise on HTTP errors.

        Args:
            method: HTTP method.
            path: API path or absolute URL.
            bearer: Token overriding the installation token.
            **kwargs: Forwarded to ``httpx.AsyncClient.request``.

        Returns:
            httpx.Response: the successful response.
        """
        if "json" in kwargs:
            kwargs["content"] = orjson.dumps(kwargs.pop("json"))
            kwargs.setdefault("headers", {})["Content-Type"] = "application/json"
        headers = {**self._headers(bearer), **kwargs.pop("headers", {})}
        client = await self._get_client()
        response = await client.request(method, self._url(path), headers=headers, **kwargs)
        response.raise_for_status()
        return response

    async def request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode its JSON body.

        Args:
            method: HTTP method.
            path: API path or absolute URL.
            **kwargs: Forwarded to ``request``.

        Returns:
            Any: decoded body.
        """
        response = await self.request(method, path, **kwargs)
        return orjson.loads(response.content)

    async def paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        """Collect all pages of a list endpoint following ``Link: rel="next"``.

        Args:
            path: API path of the first page.
            params: Query parameters of the first page.

        Returns:
            List[Any]: items from every page.
        """
        items: List[Any] = []
        url: Optional[str] = path
        query: Optional[Dict[str, Any]] = {"per_page": PAGE_SIZE, **(params or {})}
        while url:
            response = await self.request("GET", url, params=query)
            items.extend(orjson.loads(response.content))
            url = response.links.get("next", {}).get("url")
            query = None
        return items

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def authenticate_app(self, app_id: str, private_key: str, installation_id: int) -> GitHubAppInfo:
        """Authenticate as the app and obtain an installation token.

        Args:
            app_id: GitHub App identifier.
            private_key: PEM private key of the app.
            installation_id: Installation of the app on the organization.

        Returns:
            GitHubAppInfo: The authenticated app.

        Raises:
            AuthenticationError: If signing, the app check or the token exchange fails.
        """
        try:
            app_jwt = create_app_jwt(app_id, private_key)
            app_data = await self.request_json("GET", "/app", bearer=app_jwt)
            token_data = await self.request_json("POST", f"/app/installations/{installation_id}/access_tokens", bearer=app_jwt)
            app = GitHubAppInfo.model_validate(app_data)
        except (httpx.HTTPError, jwt.PyJWTError, ValueError) as exc:
            raise AuthenticationError(f"authentication failed: {exc}") from exc

        if not token_data.get("token"):
            raise AuthenticationError("authentication failed: no installation token issued")

        self.app = app
        self._token = token_data["token"]
        logger.debug("authenticated as %s", self.app.name)
        return self.app

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    async def list_org_repositories(self, org: str) -> List[RepositoryRef]:
        """List every repository of the organization except ``.github``.

        Args:
            org: Organization login.

        Returns:
            List[RepositoryRef]: repositories in API order.
        """
        raw = await self.paginate(f"/orgs/{org}/repos", params={"type": "all"})
        return [
            RepositoryRef(name=repo["name"], owner=repo["owner"]["login"], archived=bool(repo.get("archived")))
            for repo in raw
            if repo["name"] != COMMUNITY_HEALTH_REPOSITORY
        ]

    async def get_dependency_graph(self, repository: RepositoryRef) -> DependencyGraphDocument:
        """Export the SPDX dependency graph of a repository.

        Args:
            repository: The repository.

        Returns:
            DependencyGraphDocument: parsed SBOM.
        """
        payload = await self.request_json("GET", f"/repos/{repository.owner}/{repository.name}/dependency-graph/sbom")
        return DependencyGraphDocument.model_validate_sbom_response(payload)

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    async def list_issues(self, owner: str, repo: str, creator: str) -> List[Dict[str, Any]]:
        """List open issues created by ``creator``.

        Args:
            owner: Repository owner.
            repo: Repository name.
            creator: Login of the issue author.

        Returns:
            List[Dict[str, Any]]: issue objects.
        """
        return await self.request_json("GET", f"/repos/{owner}/{repo}/issues", params={"creator": creator})

    async def create_issue(self, owner: str, repo: str, title: str, body: str) -> int:
        """Create an issue.

        Args:
            owner: Repository owner.
            repo: Repository name.
            title: Issue title.
            body: Issue body.

        Returns:
            int: the new issue number.
        """
        data = await self.request_json("POST", f"/repos/{owner}/{repo}/issues", json={"title": title, "body": body})
        return data["number"]

    async def update_issue(self, owner: str, repo: str, issue_number: int, title: str, body: str) -> None:
        """Update an issue's title and body.

        Args:
            owner: Repository owner.
            repo: Repository name.
            issue_number: Issue to update.
            title: Issue title.
            body: Issue body.
        """
        await self.request("PATCH", f"/repos/{owner}/{repo}/issues/{issue_number}", json={"title": title, "body": body})

    async def list_issue_comments(self, owner: str, repo: str, issue_number: int) -> List[IssueComment]:
        """List the comments of an issue, oldest first.

        Args:
            owner: Repository owner.
            repo: Repository name.
            issue_number: Issue number.

        Returns:
            List[IssueComment]: comments.
        """
        data = await self.request_json("GET", f"/repos/{owner}/{repo}/issues/{issue_number}/comments", params={"sort": "created"})
        return [IssueComment.model_validate(comment) for comment in data]

    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> IssueComment:
        """Add a comment to an issue.

        Args:
            owner: Repository owner.
            repo: Repository name.
            issue_number: Issue number.
            body: Comment body.

        Returns:
            IssueComment: the created comment.
        """
        data = await self.request_json("POST", f"/repos/{owner}/{repo}/issues/{issue_number}/comments", json={"body": body})
        return IssueComment.model_validate(data)

    async def update_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> IssueComment:
        """Replace the body of a comment.

        Args:
            owner: Repository owner.
            repo: Repository name.
            comment_id: Comment identifier.
            body: New body.

        Returns:
            IssueComment: the updated comment.
        """
        data = await self.request_json("PATCH", f"/repos/{owner}/{repo}/issues/comments/{comment_id}", json={"body": body})
        return IssueComment.model_validate(data)
