"""Categorised top headlines aggregated from a remote JSON source."""
