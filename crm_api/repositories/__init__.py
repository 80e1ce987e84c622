"""Repositories package: all SQLAlchemy queries live here.

Rule: services call repositories, repositories call the DB.
"""
