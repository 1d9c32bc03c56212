"""Ticketmaster Discovery API event search."""

from __future__ import annotations

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import CanonicalId, EnrichmentResult, EventsEnrichment
from cao_engine.verification.hooks.base import HTTPHook

EVENTS_URL = "https://app.ticketmaster.com/discovery/v2/events.json"


class TicketmasterHook(HTTPHook):
    name = "ticketmaster"
    domains = frozenset({"events", "music"})
    priority = 80

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        params = {"keyword": candidate.query, "apikey": self._api_key, "size": 1}
        location = context.location_hint
        if location and location.city:
            params["city"] = location.city
        elif location and location.coordinates:
            params["latlong"] = f"{location.coordinates.lat},{location.coordinates.lng}"

        data = await self._get_json(EVENTS_URL, params=params)
        events = (data.get("_embedded") or {}).get("events") or []
        if not events:
            return None
        event = events[0]

        venue = ((event.get("_embedded") or {}).get("venues") or [{}])[0]
        address = (venue.get("address") or {}).get("line1")
        venue_address = None
        if address:
            city = (venue.get("city") or {}).get("name", "")
            state = (venue.get("state") or {}).get("stateCode", "")
            venue_address = ", ".join(p for p in (address, city, state) if p)
        start = (event.get("dates") or {}).get("start") or {}
        prices = (event.get("priceRanges") or [None])[0]
        images = event.get("images") or []

        return EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="ticketmaster_id", value=event["id"]),
            events=EventsEnrichment(
                venue=venue.get("name"),
                venue_address=venue_address,
                start_date=start.get("dateTime") or start.get("localDate"),
                ticket_url=event.get("url"),
                price_range=f"${prices.get('min')} - ${prices.get('max')}" if prices else None,
                image_url=images[0].get("url") if images else None,
                status=((event.get("dates") or {}).get("status") or {}).get("code"),
            ),
        )

    async def _ping(self) -> None:
        await self._get_json(
            EVENTS_URL, params={"keyword": "test", "apikey": self._api_key, "size": 1}
        )
