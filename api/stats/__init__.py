"""Statistics service: records endpoint hits and serves aggregated counters.

Runs as its own ASGI app (``stats.main:app``) with its own database.
"""
