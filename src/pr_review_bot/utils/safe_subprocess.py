"""Safe subprocess wrapper for gh CLI operations.

All GitHub REST calls go through ``gh api``. The wrapper:
- Never uses shell=True
- Validates repository names before they are interpolated into API paths
- Enforces timeouts on every call
- Maps common gh failures onto specific exceptions
- Passes the configured token to gh through ``GH_TOKEN``
"""

from __future__ import annotations

import asyncio
import json
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import structlog

from pr_review_bot.utils.security import SecurityError, validate_repo_name

log = structlog.get_logger()


class GHCliError(Exception):
    """Base exception for gh CLI errors."""


class AuthenticationError(GHCliError):
    """Raised when gh CLI authentication fails."""


class RateLimitError(GHCliError):
    """Raised when GitHub rate limit is exceeded."""


class NotFoundError(GHCliError):
    """Raised when a resource is not found."""


class PermissionError(GHCliError):
    """Raised when permission is denied."""


class CommandTimeoutError(GHCliError):
    """Raised when a command times out."""


@dataclass
class CommandResult:
    """Result of a gh CLI command execution."""

    stdout: str
    stderr: str
    return_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Return True if the command succeeded."""
        return self.return_code == 0

    def json(self) -> Any:
        """Parse stdout as JSON.

        Raises:
            ValueError: If stdout is not valid JSON.
        """
        return json.loads(self.stdout)


class SafeGHCli:
    """Safe wrapper for GitHub CLI (gh) operations.

    Example:
        gh = SafeGHCli(token="ghp_...")
        result = await gh.api("/repos/owner/repo/pulls", {"state": "closed"})
        pulls = result.json()
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        gh_path: str | None = None,
        token: str | None = None,
        default_timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the SafeGHCli wrapper.

        Args:
            gh_path: Path to the gh CLI binary. If None, uses PATH.
            token: GitHub token exported to gh as GH_TOKEN. If None, gh uses
                its own stored credentials.
            default_timeout: Default timeout for commands in seconds.

        Raises:
            GHCliError: If gh CLI is not found.
        """
        resolved_path = gh_path or self._find_gh()
        if not resolved_path:
            raise GHCliError("gh CLI not found. Please install it from https://cli.github.com")

        self._gh_path: str = resolved_path
        self._token = token
        self._default_timeout = default_timeout

    def _find_gh(self) -> str | None:
        """Find the gh CLI binary in PATH."""
        return shutil.which("gh")

    def _env(self) -> dict[str, str]:
        """Build the environment for gh invocations."""
        env = dict(os.environ)
        if self._token:
            env["GH_TOKEN"] = self._token
        # Never prompt in CI
        env["GH_PROMPT_DISABLED"] = "1"
        return env

    def validate_repo(self, repo: str) -> None:
        """Validate a repository name.

        Raises:
            SecurityError: If the repository name is invalid.
        """
        if not validate_repo_name(repo):
            log.warning("invalid_repo_name_rejected", repo=repo)
            raise SecurityError(f"Invalid repository name: {repo}")

    def _parse_error(self, result: CommandResult) -> GHCliError:
        """Parse a failed command result into a specific error type."""
        combined = (result.stderr + result.stdout).lower()
        detail = result.stderr or result.stdout

        if "authentication" in combined or "not logged in" in combined or "bad credentials" in combined:
            return AuthenticationError(f"Authentication failed: {detail}")

        if "rate limit" in combined:
            return RateLimitError(f"Rate limit exceeded: {detail}")

        if "not found" in combined or "could not resolve" in combined:
            return NotFoundError(f"Resource not found: {detail}")

        if "permission denied" in combined or "forbidden" in combined:
            return PermissionError(f"Permission denied: {detail}")

        return GHCliError(f"Command failed: {detail}")

    async def _run_command(
        self,
        args: list[str],
        timeout: int | None = None,
        check: bool = True,
    ) -> CommandResult:
        """Run a gh CLI command safely.

        Args:
            args: Command arguments (without 'gh' prefix).
            timeout: Timeout in seconds (uses default if None).
            check: If True, raise an exception on failure.

        Returns:
            CommandResult with stdout, stderr, and return code.

        Raises:
            CommandTimeoutError: If the command times out.
            GHCliError: If check=True and the command fails.
        """
        cmd = [self._gh_path, *args]
        effective_timeout = timeout or self._default_timeout
        env = self._env()

        log.debug("executing_gh_command", command=cmd, timeout=effective_timeout)

        try:

            def run_sync() -> subprocess.CompletedProcess[str]:
                return subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=effective_timeout,
                    shell=False,
                    env=env,
                )

            proc = await asyncio.wait_for(
                asyncio.to_thread(run_sync),
                timeout=effective_timeout + 5,
            )

        except subprocess.TimeoutExpired as e:
            log.error("command_timeout", command=cmd, timeout=effective_timeout)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {cmd}"
            ) from e

        except TimeoutError as e:
            log.error("command_timeout", command=cmd, timeout=effective_timeout)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {cmd}"
            ) from e

        result = CommandResult(
            stdout=proc.stdout,
            stderr=proc.stderr,
            return_code=proc.returncode,
            command=cmd,
        )

        if check and not result.success:
            raise self._parse_error(result)

        return result

    async def api(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """Perform a GET request against the GitHub REST API.

        Args:
            path: API path, e.g. ``/repos/owner/repo/pulls``.
            params: Query parameters appended to the path.
            timeout: Timeout in seconds (uses default if None).

        Returns:
            CommandResult whose stdout is the JSON response body.

        Raises:
            GHCliError: If the request fails.
        """
        if params:
            path = f"{path}?{urlencode(params)}"

        args = [
            "api",
            "--method",
            "GET",
            "-H",
            "Accept: application/vnd.github+json",
            path,
        ]

        return await self._run_command(args, timeout=timeout)
