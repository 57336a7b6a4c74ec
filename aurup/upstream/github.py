"""GitHub Releases API queries.

Only the tag of the latest release is consumed; normalization and
validation of the tag happen in the update service, not here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from aurup.core.result import Err, Ok, Result
from aurup.upstream.http import HttpError

if TYPE_CHECKING:
    from aurup.upstream.http import HttpClient

__all__ = ["GITHUB_API", "github_latest_tag", "latest_release_url"]

GITHUB_API = "https://api.github.com"


def latest_release_url(owner: str, repo: str) -> str:
    return f"{GITHUB_API}/repos/{owner}/{repo}/releases/latest"


def github_latest_tag(http: HttpClient, owner: str, repo: str) -> Result[str, HttpError]:
    """Fetch the tag of the latest published release.

    Args:
        http: HTTP client to use
        owner: Repository owner (e.g. "ninja-build")
        repo: Repository name (e.g. "ninja")

    Returns:
        Ok with the raw tag as published (e.g. "v1.12.1"), or Err with
        HttpError when the request fails or the tag cannot be located

    Example:
        >>> client = MockHttpClient()
        >>> client.set_json(latest_release_url("o", "r"), {"tag_name": "v1.0"})
        >>> github_latest_tag(client, "o", "r")
        Ok('v1.0')
    """
    url = latest_release_url(owner, repo)
    result = http.get_json(url)
    if isinstance(result, Err):
        return result

    tag_name = result.value.get("tag_name")
    if not isinstance(tag_name, str) or not tag_name.strip():
        return Err(HttpError(url=url, status=0, message="Missing tag_name in response"))

    return Ok(tag_name.strip())
