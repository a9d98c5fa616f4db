"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FeedConfig: RSS feed location and HTTP settings
- LedgerConfig: Dedup ledger backend settings
- ProviderConfig: Generative backend settings
- SummaryConfig: Summarization budget and retry settings
- PublisherConfig: Content store settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class FeedConfig:
    """Configuration for the source feed.

    Attributes:
        url: Location of the RSS document
        max_items_per_run: Cap on items considered per run
        timeout_seconds: HTTP request timeout
        user_agent: HTTP User-Agent header string
        trust_env: Whether to respect system proxy settings
        slug_host: Host whose first path segment is used as the artifact slug
    """

    url: str = "https://blog.cloudflare.com/rss/"
    max_items_per_run: int = 10
    timeout_seconds: float = 20.0
    user_agent: str = "autoblog/1.0"
    trust_env: bool = True
    slug_host: str = "blog.cloudflare.com"


@dataclass
class LedgerConfig:
    """Configuration for the dedup ledger.

    Attributes:
        enabled: Whether a ledger binding is present (dedup on/off)
        backend: "sqlite" for a file-backed store, "memory" for a process-local one
        path: SQLite database path
        ttl_seconds: Optional expiry for ledger entries
        page_size: Maximum keys returned per list page
    """

    enabled: bool = True
    backend: str = "sqlite"
    path: str = ".autoblog/ledger.sqlite3"
    ttl_seconds: int | None = None
    page_size: int = 1000


@dataclass
class ProviderConfig:
    """Configuration for the generative-text backend.

    Attributes:
        name: Provider name ("workers_ai", "gemini", "openai", "openai_compatible")
        model: Model identifier
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable name containing the API key
        account_id: Optional inline Workers AI account id
        account_id_env: Environment variable name containing the account id
        base_url: Base URL for the provider API (provider default when empty)
        timeout_seconds: Request timeout for one generation call
        trust_env: Whether to respect system proxy settings for API requests
        log_redaction: Redaction mode for logged responses ("none", "redact_urls", "redact_content")
        log_max_chars: Maximum characters of a logged response
    """

    name: str = "workers_ai"
    model: str = "@cf/meta/llama-3.1-8b-instruct"
    api_key: str | None = None
    api_key_env: str = "AUTOBLOG_AI_API_KEY"
    account_id: str | None = None
    account_id_env: str = "CLOUDFLARE_ACCOUNT_ID"
    base_url: str | None = None
    timeout_seconds: float = 60.0
    trust_env: bool = True
    log_redaction: str = "none"
    log_max_chars: int = 2000


@dataclass
class SummaryConfig:
    """Configuration for summarization.

    Attributes:
        max_input_chars: Character budget for the plain-text content in the prompt
        max_output_tokens: Output token budget requested from the backend
        temperature: Sampling temperature
        min_chars: Shortest response accepted as a summary
        max_attempts: Attempt ceiling before giving up
        retry_base_delay: Seconds multiplied by the attempt index between attempts
        include_disclaimer: Whether to prepend the disclaimer paragraph
    """

    max_input_chars: int = 4000
    max_output_tokens: int = 512
    temperature: float = 0.7
    min_chars: int = 50
    max_attempts: int = 3
    retry_base_delay: float = 1.0
    include_disclaimer: bool = True


@dataclass
class PublisherConfig:
    """Configuration for the content store.

    Attributes:
        backend: "github" for the Contents API, "local" for a directory on disk
        owner: Repository owner (falls back to GITHUB_OWNER)
        repo: Repository name (falls back to GITHUB_REPO)
        token: Optional inline token (overrides env var)
        token_env: Environment variable name containing the token
        branch: Target branch for commits
        content_root: Directory inside the repository holding artifacts
        api_base: GitHub API base URL
        local_root: Root directory for the local backend
        request_delay: Seconds to wait between publishes in a batch
        timeout_seconds: HTTP request timeout
    """

    backend: str = "github"
    owner: str | None = None
    repo: str | None = None
    token: str | None = None
    token_env: str = "GITHUB_TOKEN"
    branch: str = "main"
    content_root: str = "site/content/posts"
    api_base: str = "https://api.github.com"
    local_root: str = "."
    request_delay: float = 1.0
    timeout_seconds: float = 30.0


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        log_dir: Directory for the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"
    log_dir: str = ".autoblog/logs"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "none"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    feed: FeedConfig = field(default_factory=FeedConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    publisher: PublisherConfig = field(default_factory=PublisherConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS: dict[str, type] = {
    "feed": FeedConfig,
    "ledger": LedgerConfig,
    "provider": ProviderConfig,
    "summary": SummaryConfig,
    "publisher": PublisherConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            allowed = {k: v for k, v in value.items() if k in data[key]}
            data[key].update(allowed)
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)


def get_account_id(cfg: ProviderConfig) -> str | None:
    """Get the Workers AI account id from inline config or environment variable."""
    if cfg.account_id:
        return cfg.account_id
    return os.getenv(cfg.account_id_env)


def get_github_settings(cfg: PublisherConfig) -> tuple[str | None, str | None, str | None]:
    """Return (token, owner, repo), each from inline config or the environment."""
    token = cfg.token or os.getenv(cfg.token_env)
    owner = cfg.owner or os.getenv("GITHUB_OWNER")
    repo = cfg.repo or os.getenv("GITHUB_REPO")
    return token, owner, repo
