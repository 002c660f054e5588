"""
users_api.api

API package for the users service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, envelopes and error mapping.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer should remain thin: request validation + principal resolution + delegation to services.
