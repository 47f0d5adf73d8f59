from __future__ import annotations

from typing import Protocol

from classifieds.core.models import Location


class GeocodingError(Exception):
    pass


class Geocoder(Protocol):
    def resolve(self, address: str) -> Location:
        """Resolve free-text address into coordinates, raising GeocodingError on failure."""


class StubGeocoder:
    # TODO: replace with a Google Geocoding API client once an API key is provisioned.
    def __init__(self, location: Location | None = None) -> None:
        self.location = location or Location(lat=55.0, lng=35.0)

    def resolve(self, address: str) -> Location:
        return self.location
