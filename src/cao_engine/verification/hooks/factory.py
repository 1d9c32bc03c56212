"""Build the hook registry from settings."""

from __future__ import annotations

import httpx

from cao_engine.config.settings import Settings
from cao_engine.exceptions import ConfigurationError
from cao_engine.observability.logger import get_logger
from cao_engine.verification.hooks.google_places import GooglePlacesHook
from cao_engine.verification.hooks.musicbrainz import MusicBrainzHook
from cao_engine.verification.hooks.newsapi import NewsAPIHook
from cao_engine.verification.hooks.omdb import OMDbHook
from cao_engine.verification.hooks.openlibrary import OpenLibraryHook
from cao_engine.verification.hooks.ticketmaster import TicketmasterHook
from cao_engine.verification.hooks.tmdb import TMDBHook
from cao_engine.verification.hooks.wikipedia import WikipediaHook
from cao_engine.verification.hooks.youtube import YouTubeHook
from cao_engine.verification.registry import HookRegistry

logger = get_logger("hook_factory")


def create_hook_registry(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> HookRegistry:
    """Register every built-in hook whose credentials are configured."""
    specs = [
        (GooglePlacesHook, settings.google_places_api_key),
        (TMDBHook, settings.tmdb_api_key),
        (OMDbHook, settings.omdb_api_key),
        (MusicBrainzHook, ""),
        (TicketmasterHook, settings.ticketmaster_api_key),
        (YouTubeHook, settings.youtube_api_key),
        (NewsAPIHook, settings.newsapi_key),
        (OpenLibraryHook, ""),
        (WikipediaHook, ""),
    ]

    registry = HookRegistry()
    for hook_cls, api_key in specs:
        try:
            hook = hook_cls(
                api_key=api_key,
                client=client,
                timeout_s=settings.provider_http_timeout_s,
                user_agent=settings.provider_user_agent,
            )
        except ConfigurationError as e:
            logger.info("hook_skipped", hook=hook_cls.name, reason=str(e))
            continue
        registry.register(hook)

    logger.info("hook_registry_ready", hooks=registry.names())
    return registry
