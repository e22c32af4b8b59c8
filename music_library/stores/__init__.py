"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: engine, sessions, the song repository
- Redis: song snapshot cache with TTL

No orchestration logic in stores - that belongs in services.
"""
