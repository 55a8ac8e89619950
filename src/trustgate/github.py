"""GitHub REST and GraphQL client.

Requests are authenticated with credentials from a CredentialStore, usually
the App installation, and fetched fresh for each request so that cached
tokens are refreshed before they expire.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

from trustgate.credentials import CredentialStore, UserCredentialStore
from trustgate.errors import GraphQLError, NotFoundError
from trustgate.http import HttpClient

logger = logging.getLogger(__name__)

IS_GITHUB_STAR_QUERY = """
query($login: String!) {
  user(login: $login) {
    isGitHubStar
  }
}
""".strip()


class GitHubClient(HttpClient):
    """Client for the parts of the GitHub API used by the package registries.

    Attributes:
        credentials: Store providing the credentials for each request.
        graphql_url: URL of the GraphQL endpoint.
    """

    def __init__(
        self,
        credentials: Optional[CredentialStore] = None,
        api_url: str = "https://api.github.com",
        graphql_url: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize GitHubClient.

        Args:
            credentials: Credential store used to authenticate requests.
                Defaults to anonymous access.
            api_url: Base URL of the REST API.
            graphql_url: URL of the GraphQL API. Defaults to api_url + "/graphql".
            timeout: Total timeout in seconds for each request.
        """
        super().__init__(base_url=api_url, timeout=timeout)
        self.credentials = credentials or UserCredentialStore()
        self.graphql_url = graphql_url or f"{self.base_url}/graphql"

    async def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

        credentials = await self.credentials.get_credentials()
        if credentials.authorization_header:
            headers["Authorization"] = credentials.authorization_header

        return headers

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        url = self._url(path)
        logger.debug("%s %s", method, url)

        headers = await self._headers()
        session = await self._get_session()

        async with session.request(method, url, json=json, headers=headers) as response:
            if response.status == 404:
                raise NotFoundError(url)
            response.raise_for_status()
            return await response.json(content_type=None)

    async def get_reference(self, owner: str, repo: str, ref: str) -> dict[str, Any]:
        """Get a single Git reference such as "tags/v3".

        Raises:
            NotFoundError: If the reference does not exist.
        """
        return await self._request(
            "GET", f"/repos/{owner}/{repo}/git/ref/{quote(ref, safe='/')}"
        )

    async def get_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        """Get a Git commit by its SHA.

        Raises:
            NotFoundError: If the commit does not exist.
        """
        return await self._request(
            "GET", f"/repos/{owner}/{repo}/git/commits/{quote(sha, safe='')}"
        )

    async def get_release_by_tag(self, owner: str, repo: str, tag: str) -> dict[str, Any]:
        """Get a release by its tag name.

        Raises:
            NotFoundError: If there is no release for the tag.
        """
        return await self._request(
            "GET", f"/repos/{owner}/{repo}/releases/tags/{quote(tag, safe='')}"
        )

    async def get_contents(self, owner: str, repo: str, path: str) -> list[dict[str, Any]]:
        """Get the contents of a path in a repository.

        A single file or submodule is returned as a one-item list.

        Raises:
            NotFoundError: If the path does not exist.
        """
        data = await self._request(
            "GET", f"/repos/{owner}/{repo}/contents/{quote(path.strip('/'), safe='/')}"
        )
        if isinstance(data, list):
            return data
        return [data]

    async def graphql(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Run a GraphQL query.

        Returns:
            The "data" object of the response.

        Raises:
            GraphQLError: If the response contains errors.
        """
        body = await self._request(
            "POST",
            self.graphql_url,
            json={"query": query, "variables": variables or {}},
        )

        if body.get("errors"):
            raise GraphQLError(body["errors"], query)

        return body.get("data") or {}

    async def is_github_star(self, login: str) -> bool:
        """Return whether a user is a member of the GitHub Stars program.

        Raises:
            GraphQLError: If the user does not exist or the query fails.
        """
        data = await self.graphql(IS_GITHUB_STAR_QUERY, {"login": login})
        user = data.get("user") or {}
        return bool(user.get("isGitHubStar"))
