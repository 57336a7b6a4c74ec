"""Upstream release resolution (GitHub API or a per-package command)."""

from .command import run_tag_command
from .github import github_latest_tag, latest_release_url
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "github_latest_tag",
    "latest_release_url",
    "run_tag_command",
]
