"""Google Places (New) text search."""

from __future__ import annotations

from cao_engine.models.domain import RawCandidate, VerificationContext
from cao_engine.models.schemas import (
    CanonicalId,
    Coordinates,
    EnrichmentResult,
    PlacesEnrichment,
    Review,
)
from cao_engine.verification.hooks.base import HTTPHook

SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"

FIELD_MASK = ",".join(
    [
        "places.id",
        "places.displayName",
        "places.formattedAddress",
        "places.rating",
        "places.userRatingCount",
        "places.priceLevel",
        "places.currentOpeningHours",
        "places.websiteUri",
        "places.nationalPhoneNumber",
        "places.googleMapsUri",
        "places.photos",
        "places.reviews",
        "places.location",
    ]
)

PRICE_LEVELS = {
    "PRICE_LEVEL_FREE": "$",
    "PRICE_LEVEL_INEXPENSIVE": "$",
    "PRICE_LEVEL_MODERATE": "$$",
    "PRICE_LEVEL_EXPENSIVE": "$$$",
    "PRICE_LEVEL_VERY_EXPENSIVE": "$$$$",
}


class GooglePlacesHook(HTTPHook):
    name = "google_places"
    domains = frozenset({"places"})
    priority = 100

    def _headers(self, field_mask: str = FIELD_MASK) -> dict:
        return {"X-Goog-Api-Key": self._api_key, "X-Goog-FieldMask": field_mask}

    async def enrich(
        self, candidate: RawCandidate, context: VerificationContext
    ) -> EnrichmentResult | None:
        text_query = candidate.query
        if context.location_hint and context.location_hint.city:
            text_query = f"{text_query} {context.location_hint.city}"

        data = await self._post_json(
            SEARCH_URL,
            {"textQuery": text_query.strip(), "languageCode": "en"},
            headers=self._headers(),
        )
        places = data.get("places") or []
        if not places:
            return None
        place = places[0]

        location = place.get("location")
        hours = place.get("currentOpeningHours") or {}
        return EnrichmentResult(
            verified=True,
            source=self.name,
            canonical=CanonicalId(type="google_place_id", value=place["id"]),
            places=PlacesEnrichment(
                rating=place.get("rating"),
                review_count=place.get("userRatingCount"),
                price_level=PRICE_LEVELS.get(place.get("priceLevel", ""), "$$"),
                open_now=hours.get("openNow"),
                hours=hours.get("weekdayDescriptions") or [],
                address=place.get("formattedAddress"),
                phone=place.get("nationalPhoneNumber"),
                website=place.get("websiteUri"),
                google_maps_url=place.get("googleMapsUri"),
                location=Coordinates(lat=location["latitude"], lng=location["longitude"])
                if location
                else None,
                photos=[
                    f"https://places.googleapis.com/v1/{p['name']}/media"
                    f"?key={self._api_key}&maxHeightPx=800&maxWidthPx=800"
                    for p in (place.get("photos") or [])[:5]
                ],
                reviews=[
                    Review(
                        rating=r.get("rating", 0),
                        text=(r.get("text") or {}).get("text", ""),
                        author=(r.get("authorAttribution") or {}).get("displayName", "Anonymous"),
                    )
                    for r in (place.get("reviews") or [])[:3]
                ],
            ),
        )

    async def _ping(self) -> None:
        await self._post_json(
            SEARCH_URL,
            {"textQuery": "health check", "languageCode": "en"},
            headers=self._headers("places.id"),
        )
