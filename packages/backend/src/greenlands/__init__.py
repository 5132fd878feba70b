"""GreenLands — agricultural land-management platform API.

The backend behind the farmer, government, analyst and admin dashboards:
land parcels, farmer and official profiles, subsidies, support tickets,
finances, and the analytics payloads every dashboard renders.
"""

__version__ = "0.1.0"
