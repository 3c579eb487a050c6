"""FastAPI routers for API endpoints.

Each router module defines endpoints for a specific resource (health, sessions, chat).
"""
