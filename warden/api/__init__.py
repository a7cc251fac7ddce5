"""HTTP boundary (FastAPI routers)."""
