"""Payment Pydantic schemas."""


from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator

from crm_api.schemas.common import CamelModel, not_in_future

class PaymentCreate(CamelModel):
    company_id: str
    amount: Decimal = Field(gt=0)
    payment_date: datetime
    notes: str | None = None

    @field_validator("payment_date")
    @classmethod
    def _not_in_future(cls, v: datetime) -> datetime:
        return not_in_future(v, "paymentDate")

class PaymentOut(CamelModel):
    id: str
    company_id: str
    amount: Decimal
    payment_date: datetime
    created_by: str
    notes: str | None = None
    created_at: datetime
