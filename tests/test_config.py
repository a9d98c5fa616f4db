"""Tests for YAML config loading and credential lookup."""

from autoblog.config import AppConfig, PublisherConfig, get_github_settings, load_config


def test_load_config_defaults_without_path():
    cfg = load_config(None)
    assert cfg == AppConfig()
    assert cfg.feed.max_items_per_run == 10
    assert cfg.summary.max_attempts == 3
    assert cfg.publisher.content_root == "site/content/posts"


def test_load_config_merges_sections_and_ignores_unknown_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "feed:\n"
        "  url: https://blog.example.com/rss/\n"
        "  max_items_per_run: 5\n"
        "  not_a_field: 1\n"
        "summary:\n"
        "  include_disclaimer: false\n"
        "publisher:\n"
        "  backend: local\n"
        "unknown_section:\n"
        "  x: 1\n"
        "ledger: not-a-mapping\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.feed.url == "https://blog.example.com/rss/"
    assert cfg.feed.max_items_per_run == 5
    assert cfg.feed.timeout_seconds == 20.0
    assert cfg.summary.include_disclaimer is False
    assert cfg.publisher.backend == "local"
    assert cfg.ledger.enabled is True


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == AppConfig()


def test_github_settings_fall_back_to_env(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "env-token")
    monkeypatch.setenv("GITHUB_OWNER", "acme")
    monkeypatch.setenv("GITHUB_REPO", "site")

    assert get_github_settings(PublisherConfig()) == ("env-token", "acme", "site")
    assert get_github_settings(PublisherConfig(token="inline", repo="other")) == (
        "inline",
        "acme",
        "other",
    )
