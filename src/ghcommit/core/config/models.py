"""
Configuration data models for gh-commit.

These models define the structure of .gh-commit.json and
~/.config/gh-commit/config.json files, with validation and type safety via
Pydantic.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiConfig(BaseModel):
    """
    Settings for talking to the GitHub API.

    Rate-limited calls are retried after a fixed wait; everything else
    fails immediately.
    """

    hostname: str | None = Field(
        default=None,
        description="GitHub host to use when the repository does not name one",
    )
    rate_limit_retries: int = Field(
        default=3,
        ge=0,
        description="How many times a rate-limited call is retried",
    )
    rate_limit_wait: float = Field(
        default=60.0,
        ge=0.0,
        description="Seconds to wait before retrying a rate-limited call",
    )
    timeout: int = Field(
        default=120,
        ge=1,
        description="Seconds to wait for a single API call",
    )
    force_update: bool = Field(
        default=True,
        description="Allow non-fast-forward updates of the target branch",
    )


class GhCommitConfig(BaseModel):
    """
    Main gh-commit configuration.

    Loaded from (in order of precedence):
    1. Environment variables (GH_COMMIT_*)
    2. Project config (.gh-commit.json)
    3. User config (~/.config/gh-commit/config.json)
    4. Hardcoded defaults

    Example:
        >>> config = GhCommitConfig(branch="release")
        >>> config.api.rate_limit_retries
        3
    """

    model_config = ConfigDict(
        extra="ignore",
        validate_assignment=True,
    )

    branch: str = Field(
        default="main",
        min_length=1,
        description="Branch to publish to",
    )
    message: str = Field(
        default="Commit message",
        description="Commit message used when none is given",
    )
    delete_path: str = Field(
        default="",
        description="Only deletions under this path prefix are published",
    )
    api: ApiConfig = Field(default_factory=ApiConfig)

    @field_validator("delete_path")
    @classmethod
    def normalize_delete_path(cls, v: str) -> str:
        """Strip a leading ./ so prefixes match working-copy-relative paths."""
        return v.removeprefix("./")
