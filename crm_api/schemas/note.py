"""Note Pydantic schemas."""


from datetime import datetime

from pydantic import Field

from crm_api.schemas.common import CamelModel

class NoteCreate(CamelModel):
    content: str = Field(min_length=1, max_length=10000)

class NoteUpdate(CamelModel):
    content: str = Field(min_length=1, max_length=10000)

class NoteOut(CamelModel):
    id: str
    company_id: str
    content: str
    created_by: str
    created_at: datetime
    updated_at: datetime
