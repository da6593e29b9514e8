"""
Note repository for SmartStudy.

Every read and write is scoped to ``session.user_id``.  Update of a note
outside that scope raises NotFoundError, while delete of one is a logged
no-op.
"""
from typing import List, Optional

from smartstudy.db.base import BackingStore
from smartstudy.models.auth import Session
from smartstudy.models.common import utc_timestamp
from smartstudy.models.note import CreateNoteRequest, Note, UpdateNoteRequest
from smartstudy.utils.errors import AuthError, NotFoundError, RemoteError
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


def _require_session(session: Optional[Session]) -> Session:
    if session is None:
        raise AuthError("Not authenticated")
    return session


class NotesService:
    """User-scoped CRUD over notes"""

    TABLE = "notes"

    def __init__(self, store: BackingStore):
        self.store = store

    async def list_notes(self, session: Optional[Session], query: Optional[str] = None) -> List[Note]:
        """
        The user's notes, most recently updated first.
        A non-blank ``query`` keeps only notes whose title or content contains it, ignoring case.
        """
        if session is None:
            return []

        response = await (
            self.store.table(self.TABLE, session)
            .select()
            .eq("user_id", session.user_id)
            .order("updated_at", desc=True)
            .execute()
        )
        if not response.ok:
            logger.error(f"Error listing notes for user {session.user_id}: {response.error.message}")
            return []

        notes = [Note.model_validate(row) for row in response.rows]
        term = (query or "").strip().lower()
        if term:
            notes = [n for n in notes if term in n.title.lower() or term in n.content.lower()]
        return notes

    async def _fetch_note(self, session: Session, note_id: str) -> Optional[Note]:
        """Owned note or None; store failures raise RemoteError"""
        response = await (
            self.store.table(self.TABLE, session)
            .select()
            .eq("id", note_id)
            .eq("user_id", session.user_id)
            .single()
            .execute()
        )
        if not response.ok:
            raise RemoteError(response.error.message)
        if response.data is None:
            return None
        return Note.model_validate(response.data)

    async def get_note(self, session: Optional[Session], note_id: str) -> Optional[Note]:
        """The note if it exists and belongs to the user, else None"""
        if session is None:
            return None
        try:
            return await self._fetch_note(session, note_id)
        except RemoteError as e:
            logger.error(f"Error loading note {note_id}: {e.message}")
            return None

    async def create_note(self, session: Optional[Session], data: CreateNoteRequest) -> Note:
        session = _require_session(session)

        note = Note(title=data.title, content=data.content, user_id=session.user_id)
        response = await self.store.table(self.TABLE, session).insert(note.model_dump()).execute()
        if not response.ok:
            logger.error(f"Error creating note: {response.error.message}")
            raise RemoteError(response.error.message)

        logger.info(f"Created note {note.id} for user {session.user_id}")
        return Note.model_validate(response.rows[0]) if response.rows else note

    async def update_note(self, session: Optional[Session], note_id: str, data: UpdateNoteRequest) -> Note:
        session = _require_session(session)

        existing = await self._fetch_note(session, note_id)
        if existing is None:
            raise NotFoundError("Note not found")

        fields = data.model_dump(exclude_none=True)
        fields["updated_at"] = utc_timestamp()

        response = await (
            self.store.table(self.TABLE, session)
            .update(fields)
            .eq("id", note_id)
            .eq("user_id", session.user_id)
            .execute()
        )
        if not response.ok:
            logger.error(f"Error updating note {note_id}: {response.error.message}")
            raise RemoteError(response.error.message)

        logger.info(f"Updated note {note_id}")
        if response.rows:
            return Note.model_validate(response.rows[0])
        return existing.model_copy(update=fields)

    async def delete_note(self, session: Optional[Session], note_id: str) -> None:
        """Delete the note if the user owns it; otherwise do nothing"""
        session = _require_session(session)

        response = await (
            self.store.table(self.TABLE, session)
            .delete()
            .eq("id", note_id)
            .eq("user_id", session.user_id)
            .execute()
        )
        if not response.ok:
            logger.error(f"Error deleting note {note_id}: {response.error.message}")
            raise RemoteError(response.error.message)

        if response.rows:
            logger.info(f"Deleted note {note_id}")
        else:
            logger.warning(f"Delete of note {note_id} matched nothing for user {session.user_id}")
