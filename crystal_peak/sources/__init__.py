"""Upstream data sources.

Each module exposes a ``fetch_*`` coroutine that raises on failure and pure
``map_*``/``parse_*`` functions that turn raw payloads into records.
"""
