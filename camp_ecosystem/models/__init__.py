"""Pydantic models for Camp Ecosystem."""
