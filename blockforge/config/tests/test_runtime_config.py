"""Tests for environment-backed runtime settings."""
from blockforge.config import runtime_config


def test_default_pack_reads_environment(monkeypatch):
    monkeypatch.setenv("BLOCKFORGE_DEFAULT_PACK", "mypack:base")
    assert runtime_config.get_default_pack_id() == "mypack:base"

    monkeypatch.delenv("BLOCKFORGE_DEFAULT_PACK")
    assert runtime_config.get_default_pack_id() == runtime_config.DEFAULT_PACK_ID


def test_malformed_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("BLOCKFORGE_COMPUTE_TIMEOUT_S", "soon")
    monkeypatch.setenv("BLOCKFORGE_COMPUTE_WORKERS", "0")
    assert runtime_config.get_compute_timeout_seconds() == 5.0
    assert runtime_config.get_compute_workers() == 1


def test_async_toggle(monkeypatch):
    monkeypatch.setenv("BLOCKFORGE_ASYNC_COMPUTE", "off")
    assert runtime_config.is_async_compute_enabled() is False
    monkeypatch.setenv("BLOCKFORGE_ASYNC_COMPUTE", "1")
    assert runtime_config.is_async_compute_enabled() is True


def test_cache_size_setting(monkeypatch):
    monkeypatch.setenv("BLOCKFORGE_GEOMETRY_CACHE_SIZE", "3")
    assert runtime_config.get_geometry_cache_size() == 3
    monkeypatch.setenv("BLOCKFORGE_GEOMETRY_CACHE_SIZE", "-4")
    assert runtime_config.get_geometry_cache_size() == 1
