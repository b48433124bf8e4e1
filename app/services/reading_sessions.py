"""Reading session lifecycle: start, update and end.

Sessions are keyed by (user, document). ``update`` and ``end`` act on the most
recently started session that is still open; when there is none they do
nothing. Fields on update/end are replace-on-provide: a value the caller sends
overwrites the stored one, an omitted value keeps it.
"""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.timeutils import as_utc, utc_now
from app.models.document import Document
from app.models.reading_session import ReadingSession

logger = logging.getLogger(__name__)

COMPLETION_THRESHOLD = 100


class ReadingSessionRecorder:
    """Persists reading lifecycle events for one request."""

    def __init__(self, db: Session):
        self.db = db

    def _get_owned_document(self, user_id: int, document_id: str) -> Document | None:
        return (
            self.db.query(Document)
            .filter(Document.id == document_id, Document.user_id == user_id)
            .first()
        )

    def find_open_session(self, user_id: int, document_id: str) -> ReadingSession | None:
        """Most recently started open session for (user, document).

        The row is locked (SELECT ... FOR UPDATE) so concurrent update/end
        requests for the same session serialize on PostgreSQL.
        """
        return (
            self.db.query(ReadingSession)
            .filter(
                ReadingSession.user_id == user_id,
                ReadingSession.document_id == document_id,
                ReadingSession.end_time.is_(None),
            )
            .order_by(ReadingSession.start_time.desc())
            .with_for_update()
            .first()
        )

    def start(
        self,
        user_id: int,
        document_id: str,
        chapter_id: str | None = None,
        progress: float | None = None,
    ) -> ReadingSession:
        if not self._get_owned_document(user_id, document_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")

        starting_progress = progress if progress is not None else 0
        session = ReadingSession(
            user_id=user_id,
            document_id=document_id,
            chapter_id=chapter_id,
            start_time=utc_now(),
            progress_start=starting_progress,
            progress_end=starting_progress,
            words_read=0,
            is_completed=False,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(
            f"Reading session {session.id} started | user={user_id} | "
            f"document={document_id} | chapter={chapter_id} | progress={starting_progress}"
        )
        return session

    def update(
        self,
        user_id: int,
        document_id: str,
        words_read: int | None = None,
        progress: float | None = None,
    ) -> ReadingSession | None:
        session = self.find_open_session(user_id, document_id)
        if session is None:
            logger.debug(f"No open reading session to update | user={user_id} | document={document_id}")
            return None

        if words_read is not None:
            session.words_read = words_read
        if progress is not None:
            session.progress_end = progress
        self.db.commit()

        logger.debug(
            f"Reading session {session.id} updated | words={session.words_read} | "
            f"progress={session.progress_end}"
        )
        return session

    def end(
        self,
        user_id: int,
        document_id: str,
        words_read: int | None = None,
        progress: float | None = None,
    ) -> ReadingSession | None:
        session = self.find_open_session(user_id, document_id)
        if session is None:
            logger.debug(f"No open reading session to end | user={user_id} | document={document_id}")
            return None

        end_time = utc_now()
        if words_read is not None:
            session.words_read = words_read
        if progress is not None:
            session.progress_end = progress

        session.end_time = end_time
        session.total_minutes = (end_time - as_utc(session.start_time)).total_seconds() / 60
        session.is_completed = session.progress_end >= COMPLETION_THRESHOLD

        # Pushing progress bumps the document's updated_at, which is what
        # the streak calculation counts as a day of reading.
        if progress is not None:
            document = self._get_owned_document(user_id, document_id)
            if document:
                document.progress = progress
                document.updated_at = end_time

        self.db.commit()

        logger.info(
            f"Reading session {session.id} ended | minutes={session.total_minutes:.2f} | "
            f"words={session.words_read} | completed={session.is_completed}"
        )
        return session
