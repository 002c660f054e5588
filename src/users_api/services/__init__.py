"""
users_api.services

Service-layer package.

Responsibilities:
- Own transaction boundaries.
- Run the per-route authorization protocol before touching repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services take their collaborators (session, engine) as constructor arguments so tests
# can wire them against an in-memory role store.
