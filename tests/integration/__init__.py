"""
Integration tests.

These run against a real Redis server and are skipped unless USE_REAL_REDIS=1
(REDIS_URL selects the server, default redis://localhost:6379/15).
"""
