"""
Core utilities shared across the CRM API.

This package hosts:
- configuration helpers (env vars, data paths, feature flags)
- password hashing and bearer token helpers
- cross-cutting services such as rate limiting

Routers and services should depend on these primitives instead of reading
os.environ or touching hashing/JWT libraries directly.
"""
