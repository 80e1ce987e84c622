"""Routers package: HTTP endpoint definitions.

Files:
  deps.py : shared dependencies (acting user from the X-User-Id header)
  v1/     : Versioned API routes (/api/v1/*)
"""
