"""HTTP surface (FastAPI) for chatbridge."""
