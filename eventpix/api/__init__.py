"""
API layer for the EventPix backend.

Exposes HTTP and WebSocket endpoints under /api/v1 (photos, faces, guests,
messaging, notifications).
"""
