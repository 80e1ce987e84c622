"""v1 router package: all /api/v1/* endpoints live here.

Files:
  users.py         : user directory
  companies.py     : company CRUD + meeting data
  notes.py         : notes on companies
  payments.py      : payments
  meetings.py      : meetings, RSVPs, post-meeting notes
  audits.py        : audit CRUD and scheduler operations
  tiers.py         : tier recompute, overrides, history, statistics
  notifications.py : the acting user's notifications

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to crm_api/services/.
"""

from crm_api.routers.v1.audits import router as audits_router
from crm_api.routers.v1.companies import router as companies_router
from crm_api.routers.v1.meetings import router as meetings_router
from crm_api.routers.v1.notes import router as notes_router
from crm_api.routers.v1.notifications import router as notifications_router
from crm_api.routers.v1.payments import router as payments_router
from crm_api.routers.v1.tiers import router as tiers_router
from crm_api.routers.v1.users import router as users_router

routers = [
    users_router,
    companies_router,
    notes_router,
    payments_router,
    meetings_router,
    audits_router,
    tiers_router,
    notifications_router,
]
