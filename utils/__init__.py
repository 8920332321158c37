"""Shared helpers for autostore."""
