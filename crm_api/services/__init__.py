"""Services package: all business logic lives here, never in routers.

Files:
  tiering.py         : pure tier classifier and audit cadence / due-date rules
  audit_scheduler.py : initial scheduling, completion chaining, overdue sweep, bulk reschedule
  audit.py           : audit CRUD and dashboard views
  tier.py            : bulk tier recompute, overrides, change log, review queue
  company.py         : company lifecycle (tiering + first audit on create, cascading delete)
  meeting.py         : meetings, RSVPs and notes; keeps company last-meeting fields current
  note.py / payment.py / notification.py / user.py: supporting entities
  maintenance.py     : periodic background jobs (tier update, reschedule, overdue sweep)

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
