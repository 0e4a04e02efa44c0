"""Geocoding, truck routing and route persistence services."""
