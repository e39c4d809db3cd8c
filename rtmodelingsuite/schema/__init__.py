"""Pydantic schemas for estimation configuration and dispatcher payloads."""
