"""Pydantic schemas package.

Folder intent:
  common.py       : CamelModel base + HealthResponse (all schemas inherit CamelModel)
  company.py      : Company create/update/meeting DTOs and response model
  audit.py        : Audit DTOs plus scheduler result models
  tier.py         : Tier override, change log, statistics and review models
  meeting.py      : Meeting DTOs, RSVP and notes requests
  note.py / payment.py / notification.py / user.py: supporting entities
"""
