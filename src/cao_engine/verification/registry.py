"""Registry of verification hooks, built once at startup and read-only afterwards."""

from __future__ import annotations

import asyncio

from cao_engine.exceptions import ConfigurationError
from cao_engine.observability.logger import get_logger
from cao_engine.protocols.hook import VerificationHook

logger = get_logger("hook_registry")


class HookRegistry:
    def __init__(self) -> None:
        self._hooks: dict[str, VerificationHook] = {}

    def register(self, hook: VerificationHook) -> None:
        if hook.name in self._hooks:
            raise ConfigurationError(f"Hook already registered: {hook.name}")
        self._hooks[hook.name] = hook
        logger.info(
            "hook_registered",
            hook=hook.name,
            domains=sorted(hook.domains),
            priority=hook.priority,
        )

    def get(self, name: str) -> VerificationHook | None:
        return self._hooks.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._hooks

    def __len__(self) -> int:
        return len(self._hooks)

    def names(self) -> list[str]:
        return list(self._hooks)

    def all(self) -> list[VerificationHook]:
        return list(self._hooks.values())

    def hooks_for_domain(self, domain: str) -> list[VerificationHook]:
        """Hooks serving ``domain``, highest priority first.

        Ties keep registration order. This ordering is informational; the
        executor follows the order named on each candidate.
        """
        matching = [h for h in self._hooks.values() if domain in h.domains]
        return sorted(matching, key=lambda h: h.priority, reverse=True)

    async def health_check(self) -> dict[str, bool]:
        hooks = self.all()
        results = await asyncio.gather(
            *(h.health_check() for h in hooks), return_exceptions=True
        )
        return {h.name: r is True for h, r in zip(hooks, results)}

    async def aclose(self) -> None:
        for hook in self._hooks.values():
            await hook.aclose()
