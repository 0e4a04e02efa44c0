"""Schemas package initialization."""
