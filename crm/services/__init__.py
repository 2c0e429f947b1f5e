"""
High-level use cases for the CRM API.

Each service module orchestrates the JsonStore to implement business rules
(register, issue tokens, create/update/delete properties and roles, store
uploads). Routers call these services instead of loading collections directly.
"""
