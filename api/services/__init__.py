"""Business rules of the main service.

Each module exposes async functions that take the request session first,
work through the repositories and raise ``core.errors`` exceptions, which the
error handlers turn into ApiError bodies:

    routes -> services -> repositories

Sessions are committed by ``core.database.get_db``, never here. Calls to the
statistics service go through ``core.stats_client`` and never fail a request.
"""
