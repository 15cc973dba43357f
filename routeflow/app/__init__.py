"""
Routeflow HTTP service.

FastAPI application exposing run streaming and health endpoints.
"""
