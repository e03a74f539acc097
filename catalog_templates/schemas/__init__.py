"""Pydantic schemas for catalog documents and template inputs."""
