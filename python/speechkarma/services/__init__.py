"""Business logic services.

Services are called by route handlers and orchestrate database operations,
permission checks, and the optional enrichment call.
"""
