"""Pydantic schemas for ctflow records and documents."""
