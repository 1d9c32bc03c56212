"""Tests for the hook registry."""

import pytest

from cao_engine.exceptions import ConfigurationError
from cao_engine.verification.registry import HookRegistry


def test_register_and_lookup(make_hook):
    registry = HookRegistry()
    hook = make_hook("tmdb", domains=("movies",))
    registry.register(hook)

    assert registry.get("tmdb") is hook
    assert registry.get("omdb") is None
    assert "tmdb" in registry
    assert len(registry) == 1
    assert registry.names() == ["tmdb"]


def test_duplicate_registration_rejected(make_hook):
    registry = HookRegistry()
    registry.register(make_hook("tmdb"))
    with pytest.raises(ConfigurationError):
        registry.register(make_hook("tmdb"))
    assert len(registry) == 1


def test_hooks_for_domain_sorted_by_priority(make_hook):
    registry = HookRegistry()
    registry.register(make_hook("omdb", domains=("movies",), priority=80))
    registry.register(make_hook("first", domains=("movies",), priority=100))
    registry.register(make_hook("places", domains=("places",), priority=100))
    registry.register(make_hook("second", domains=("movies",), priority=100))

    assert [h.name for h in registry.hooks_for_domain("movies")] == ["first", "second", "omdb"]
    assert registry.hooks_for_domain("books") == []


async def test_health_check_reports_each_hook(make_hook):
    registry = HookRegistry()
    good = make_hook("good")
    bad = make_hook("bad")
    bad.healthy = False
    registry.register(good)
    registry.register(bad)

    assert await registry.health_check() == {"good": True, "bad": False}


async def test_health_check_tolerates_exceptions():
    class Broken:
        name = "broken"
        domains = frozenset({"places"})
        priority = 1

        async def health_check(self):
            raise RuntimeError("down")

    registry = HookRegistry()
    registry.register(Broken())
    assert await registry.health_check() == {"broken": False}


async def test_aclose_closes_every_hook(make_hook):
    registry = HookRegistry()
    hooks = [make_hook("a"), make_hook("b")]
    for hook in hooks:
        registry.register(hook)
    await registry.aclose()
    assert all(h.closed for h in hooks)
