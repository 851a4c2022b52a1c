"""
API call dispatchers.

A dispatcher performs a single REST call against the GitHub API and
returns the decoded JSON body. The GitHub client is built on top of a
dispatcher so that credentials and rate limiting stay outside the
commit-synthesis engine and tests can swap in a fake.

Two implementations are provided:
- GhCliDispatcher runs ``gh api``, reusing the GitHub CLI's authentication
- RateLimitWaiter wraps another dispatcher and waits out rate limits
"""

from __future__ import annotations

import json
import logging
import re
import subprocess
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from ghcommit.core.github.exceptions import NotFoundError, RemoteAPIError

logger = logging.getLogger(__name__)

_HTTP_STATUS_RE = re.compile(r"\(HTTP (\d{3})\)")


@runtime_checkable
class ApiDispatcher(Protocol):
    """
    Protocol for GitHub REST call dispatchers.

    Implementations send one request and return the decoded JSON object,
    raising RemoteAPIError (or NotFoundError for HTTP 404) on failure.
    """

    def request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Perform a REST call.

        Args:
            method: HTTP method (GET, POST, PATCH, ...)
            path: API path relative to the API root, e.g. repos/o/r/git/blobs
            payload: Optional JSON body

        Returns:
            Decoded JSON response (empty dict for empty bodies)
        """
        ...


class GhCliDispatcher:
    """
    Dispatcher backed by the GitHub CLI (`gh api`).

    Authentication and host resolution are delegated to `gh`, which honors
    ``GH_TOKEN``, ``GH_HOST`` and its own stored credentials.

    Example:
        >>> dispatcher = GhCliDispatcher()
        >>> dispatcher.request("GET", "repos/octo/hello/git/ref/heads/main")
    """

    def __init__(self, hostname: str | None = None, timeout: int = 120) -> None:
        """
        Initialize GhCliDispatcher.

        Args:
            hostname: GitHub host to target (None lets gh decide)
            timeout: Seconds to wait for a single call
        """
        self.hostname = hostname
        self.timeout = timeout

    def _build_command(self, method: str, path: str, with_input: bool) -> list[str]:
        cmd = [
            "gh",
            "api",
            "--method",
            method,
            "-H",
            "Accept: application/vnd.github+json",
        ]
        if self.hostname:
            cmd.extend(["--hostname", self.hostname])
        if with_input:
            cmd.extend(["--input", "-"])
        cmd.append(path)
        return cmd

    def request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        cmd = self._build_command(method, path, payload is not None)
        input_data = json.dumps(payload) if payload is not None else None

        logger.debug("gh api %s %s", method, path)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
                input=input_data,
            )
        except subprocess.TimeoutExpired as e:
            raise RemoteAPIError(
                f"GitHub API call timed out: {method} {path}", command=cmd
            ) from e
        except (OSError, FileNotFoundError) as e:
            raise RemoteAPIError(f"Failed to run gh command: {e}", command=cmd) from e

        if result.returncode != 0:
            raise self._error_from_result(method, path, cmd, result)

        output = result.stdout.strip()
        if not output:
            return {}

        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise RemoteAPIError(
                f"Failed to parse GitHub API response: {e}", command=cmd, response=output
            ) from e

        if not isinstance(data, dict):
            raise RemoteAPIError(
                f"Unexpected GitHub API response for {method} {path}",
                command=cmd,
                response=output,
            )
        return data

    @staticmethod
    def _error_from_result(
        method: str,
        path: str,
        cmd: list[str],
        result: subprocess.CompletedProcess[str],
    ) -> RemoteAPIError:
        stderr = result.stderr.strip() if result.stderr else ""
        stdout = result.stdout.strip() if result.stdout else ""

        status: int | None = None
        if match := _HTTP_STATUS_RE.search(stderr):
            status = int(match.group(1))

        # gh prints the JSON error body on stdout
        detail = stderr or "Unknown error"
        try:
            body = json.loads(stdout) if stdout else None
            if isinstance(body, dict) and body.get("message"):
                detail = str(body["message"])
        except json.JSONDecodeError:
            pass

        message = f"GitHub API call failed: {method} {path}: {detail}"
        if status == 404:
            return NotFoundError(message, status=status, command=cmd, response=stdout)
        return RemoteAPIError(message, status=status, command=cmd, response=stdout or stderr)


class RateLimitWaiter:
    """
    Dispatcher wrapper that waits out GitHub rate limits.

    Calls that fail with a rate-limit response are retried after
    ``wait_seconds``, up to ``retries`` times. Any other failure, and the
    last rate-limit failure, propagates unchanged.
    """

    def __init__(
        self,
        inner: ApiDispatcher,
        retries: int = 3,
        wait_seconds: float = 60.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.inner = inner
        self.retries = retries
        self.wait_seconds = wait_seconds
        self._sleep = sleep

    def request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        attempt = 0
        while True:
            try:
                return self.inner.request(method, path, payload)
            except RemoteAPIError as e:
                if not e.is_rate_limited or attempt >= self.retries:
                    raise
                attempt += 1
                logger.warning(
                    "Rate limited on %s %s, waiting %.0fs (retry %d/%d)",
                    method,
                    path,
                    self.wait_seconds,
                    attempt,
                    self.retries,
                )
                self._sleep(self.wait_seconds)
