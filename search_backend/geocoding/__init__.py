"""
Offline geocoding of restaurant locations.

Responsibilities:
- Resolve each restaurant's free-text location to coordinates via Nominatim.
- Respect the public Nominatim rate limit and back off when blocked.
- Store the coordinates on the owner's user record.
"""
