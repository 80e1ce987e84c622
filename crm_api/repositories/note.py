from crm_api.domain.note import Note
from crm_api.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    model = Note
