"""Pydantic configuration model for the Fetcher facade."""

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

# Keyword arguments of ClientSession.request that the pipeline itself supplies
RESERVED_TRANSPORT_KEYS = frozenset({"method", "url", "headers", "data", "json", "allow_redirects"})


def check_transport_options(options: dict[str, Any]) -> dict[str, Any]:
    """Reject transport options that would collide with pipeline arguments."""
    clashing = sorted(RESERVED_TRANSPORT_KEYS.intersection(options))
    if clashing:
        raise ValueError(f"Transport options may not set {', '.join(clashing)}")
    return options


class FetchOptions(BaseModel):
    """
    Facade-wide configuration.

    Example:
        options = FetchOptions(
            cookies_filename=Path("cookies.json"),
            encoding="iso-8859-1",
            common_fetch_params={"proxy": "http://proxy:8080"},
        )

    YAML format:
        cookies_filename: cookies.json
        encoding: iso-8859-1
        ignore_invalid_https: true
    """

    cookies_filename: Optional[Path] = Field(
        None,
        description="JSON file the cookie jar is restored from and persisted to",
    )
    encoding: Optional[str] = Field(
        None,
        description="Default encoding responses are converted from (per-request value wins)",
    )
    common_fetch_params: dict[str, Any] = Field(
        default_factory=dict,
        description="Transport options passed to every exchange (per-request options win)",
    )
    ignore_invalid_https: bool = Field(False, description="Disable TLS certificate verification")
    timeout: Optional[float] = Field(30.0, gt=0, description="Total timeout per exchange in seconds")
    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    max_redirects: int = Field(20, ge=0, description="Maximum hops when following redirects manually")
    unsafe_cookies: bool = Field(
        False,
        description="Accept cookies from IP-address hosts (e.g. local test servers)",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("common_fetch_params")
    @classmethod
    def _check_common_fetch_params(cls, value: dict[str, Any]) -> dict[str, Any]:
        return check_transport_options(value)

    def transport_options(self) -> dict[str, Any]:
        """Transport options derived from this configuration."""
        options = dict(self.common_fetch_params)
        if self.ignore_invalid_https:
            options["ssl"] = False
        return options

    def to_yaml(self) -> str:
        """Serialize options to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "FetchOptions":
        """Load options from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "FetchOptions":
        """Load options from YAML file."""
        return cls.from_yaml(Path(path).read_text())
