"""FireRisk HTTP API."""
