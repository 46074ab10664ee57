"""Pydantic schemas for extraction payloads and pipeline results."""
