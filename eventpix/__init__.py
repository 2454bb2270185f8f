"""
EventPix Backend — root package.

This package contains the FastAPI app entry point (main.py), API routes,
domain logic, infrastructure (DB, storage, notifications, messaging) and
the face identity-matching pipeline.
"""
