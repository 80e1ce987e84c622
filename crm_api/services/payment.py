"""Payment service: records payments and keeps the company's last-payment fields current."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.core.clock import Clock, utcnow
from crm_api.core.exceptions import NotFoundError
from crm_api.core.pagination import PaginationParams
from crm_api.domain.payment import Payment
from crm_api.domain.user import User
from crm_api.repositories.company import CompanyRepository
from crm_api.repositories.payment import PaymentRepository
from crm_api.schemas.payment import PaymentCreate

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, session: AsyncSession, client_id: str, clock: Clock = utcnow):
        self._repo = PaymentRepository(session, client_id, clock)
        self._companies = CompanyRepository(session, client_id, clock)

    async def list_payments(self, pagination: PaginationParams, company_id: str | None = None):
        sort = pagination.sort if pagination.sort != "created_at" else "payment_date"
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=sort,
            order=pagination.order,
            filters={"company_id": company_id},
        )

    async def get_payment(self, payment_id: str) -> Payment:
        payment = await self._repo.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def record_payment(self, data: PaymentCreate, recorded_by: User) -> Payment:
        company = await self._companies.get_by_id(data.company_id)
        if not company:
            raise NotFoundError("Company", data.company_id)
        payment = await self._repo.create(
            company_id=company.id,
            amount=data.amount,
            payment_date=data.payment_date,
            created_by=recorded_by.id,
            notes=data.notes,
        )
        await self._sync_company(company.id)
        logger.info("Recorded payment %s of %s for company %s", payment.id, data.amount, company.id)
        return payment

    async def delete_payment(self, payment_id: str) -> None:
        payment = await self.get_payment(payment_id)
        await self._repo.soft_delete(payment.id)
        await self._sync_company(payment.company_id)

    async def _sync_company(self, company_id: str) -> None:
        """Point the company's last-payment fields at its most recent live payment."""
        latest = await self._repo.latest_for_company(company_id)
        await self._companies.update(
            company_id,
            last_payment_date=latest.payment_date if latest else None,
            last_payment_amount=latest.amount if latest else None,
        )
