"""Position sources used by the capture flow."""

from pyroadsigns.geolocation.http_provider import HttpGeolocationProvider
from pyroadsigns.geolocation.provider import GeolocationProvider, StaticGeolocationProvider

__all__ = [
    "GeolocationProvider",
    "HttpGeolocationProvider",
    "StaticGeolocationProvider",
]
