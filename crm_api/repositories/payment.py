from crm_api.domain.payment import Payment
from crm_api.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    model = Payment

    async def latest_for_company(self, company_id: str) -> Payment | None:
        result = await self._session.execute(
            self._base_query()
            .where(Payment.company_id == company_id)
            .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()
