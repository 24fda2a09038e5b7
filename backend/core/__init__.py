"""Core infrastructure for the PvP Analytics backend.

Configuration, logging, the async database manager and FastAPI dependency
helpers shared by the ingestion pipeline, the HTTP API and the CLI tools.
"""
