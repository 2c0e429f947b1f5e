"""
FastAPI routers grouped by domain (auth, users, properties, roles, upload).

Each module exposes an APIRouter included by the application factory in
crm.app. Services are read from ``request.app.state`` so that every app
instance works against its own data directory.
"""
