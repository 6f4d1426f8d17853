"""
Document store abstraction for SQL databases and an in-memory test implementation.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Type, TypeVar

from sqlalchemy import (
    JSON,
    Column,
    Float,
    Index,
    String,
    Text,
    create_engine,
    func,
    inspect,
    select,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shared.documents import (
    CareerProfile,
    ConnectionRequest,
    Document,
    InterviewAnalytics,
    InterviewSession,
    Mentorship,
    MentorshipPreferences,
    Project,
    Story,
    User,
    UserProfile,
)

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=Document)

DEFAULT_SEARCH_LIMIT = 50


class DuplicateKeyError(Exception):
    """Raised when a write would violate a unique key."""

    def __init__(self, collection: str, key: str):
        super().__init__(f"Duplicate value for {collection}.{key}")
        self.collection = collection
        self.key = key


class DbClient(Protocol):
    """Interface for document access."""

    def insert(self, doc: D) -> D:
        ...

    def get(self, doc_type: Type[D], doc_id: str) -> Optional[D]:
        ...

    def find(
        self,
        doc_type: Type[D],
        *,
        limit: Optional[int] = None,
        offset: int = 0,
        **filters: Any,
    ) -> list[D]:
        ...

    def count(self, doc_type: Type[D], **filters: Any) -> int:
        ...

    def search(
        self, doc_type: Type[D], query: str, *, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[D]:
        ...

    def update(
        self, doc_type: Type[D], doc_id: str, changes: Dict[str, Any]
    ) -> Optional[D]:
        ...

    def delete(self, doc_type: Type[Document], doc_id: str) -> bool:
        ...

    def list_collections(self) -> list[str]:
        ...


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _check_filters(doc_type: Type[Document], filters: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(filters) - set(doc_type.key_fields)
    if unknown:
        raise ValueError(
            f"Cannot filter {doc_type.collection} by {', '.join(sorted(unknown))}"
        )
    return {name: _plain(value) for name, value in filters.items()}


def _search_terms(query: str) -> list[str]:
    return [term for term in (query or "").lower().split() if term]


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Document]] = {}

    def _docs(self, doc_type: Type[Document]) -> Dict[str, Document]:
        return self.collections.setdefault(doc_type.collection, {})

    def _check_unique(self, doc: Document) -> None:
        values = doc.key_values()
        for other in self._docs(type(doc)).values():
            if other.id == doc.id:
                continue
            other_values = other.key_values()
            for key in doc.unique_fields:
                if values[key] is not None and values[key] == other_values[key]:
                    raise DuplicateKeyError(doc.collection, key)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.collections.clear()

    def insert(self, doc: D) -> D:
        self._check_unique(doc)
        self._docs(type(doc))[doc.id] = doc.model_copy(deep=True)
        return doc

    def get(self, doc_type: Type[D], doc_id: str) -> Optional[D]:
        doc = self._docs(doc_type).get(doc_id)
        return doc.model_copy(deep=True) if doc else None

    def _matching(self, doc_type: Type[D], filters: Dict[str, Any]) -> list[D]:
        filters = _check_filters(doc_type, filters)
        matches = []
        for doc in self._docs(doc_type).values():
            values = doc.key_values()
            if all(values[name] == value for name, value in filters.items()):
                matches.append(doc)
        matches.sort(key=lambda doc: doc.created_at, reverse=True)
        return matches

    def find(
        self,
        doc_type: Type[D],
        *,
        limit: Optional[int] = None,
        offset: int = 0,
        **filters: Any,
    ) -> list[D]:
        matches = self._matching(doc_type, filters)[offset:]
        if limit is not None:
            matches = matches[:limit]
        return [doc.model_copy(deep=True) for doc in matches]

    def count(self, doc_type: Type[D], **filters: Any) -> int:
        return len(self._matching(doc_type, filters))

    def search(
        self, doc_type: Type[D], query: str, *, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[D]:
        terms = _search_terms(query)
        results = []
        for doc in self._matching(doc_type, {}):
            text = doc.search_text()
            if all(term in text for term in terms):
                results.append(doc.model_copy(deep=True))
            if len(results) >= limit:
                break
        return results

    def update(
        self, doc_type: Type[D], doc_id: str, changes: Dict[str, Any]
    ) -> Optional[D]:
        current = self._docs(doc_type).get(doc_id)
        if not current:
            return None
        updated = current.with_changes(changes)
        self._check_unique(updated)
        self._docs(doc_type)[doc_id] = updated.model_copy(deep=True)
        return updated

    def delete(self, doc_type: Type[Document], doc_id: str) -> bool:
        return self._docs(doc_type).pop(doc_id, None) is not None

    def list_collections(self) -> list[str]:
        return sorted(self.collections)


Base = declarative_base()


class DocumentColumns:
    id = Column(String, primary_key=True)
    search_text = Column(Text, nullable=False, default="")
    data = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False, index=True)
    updated_at = Column(Float, nullable=False)


class UserRow(DocumentColumns, Base):
    __tablename__ = User.collection

    email = Column(String, nullable=False, unique=True)
    # NULLs never collide, so an absent identity id does not block others.
    microsoft_id = Column(String, nullable=True, unique=True)


class CareerProfileRow(DocumentColumns, Base):
    __tablename__ = CareerProfile.collection

    user_id = Column(String, nullable=False, unique=True)


class UserProfileRow(DocumentColumns, Base):
    __tablename__ = UserProfile.collection

    user_id = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True)


class StoryRow(DocumentColumns, Base):
    __tablename__ = Story.collection

    author_id = Column(String, nullable=False, index=True)
    career_stage = Column(String, nullable=False, index=True)
    visibility = Column(String, nullable=False, index=True)


class ProjectRow(DocumentColumns, Base):
    __tablename__ = Project.collection

    creator_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, index=True)


class MentorshipRow(DocumentColumns, Base):
    __tablename__ = Mentorship.collection
    __table_args__ = (
        Index("ix_mentorships_mentor_mentee", "mentor_id", "mentee_id"),
    )

    mentor_id = Column(String, nullable=False)
    mentee_id = Column(String, nullable=False)
    status = Column(String, nullable=False, index=True)


class ConnectionRequestRow(DocumentColumns, Base):
    __tablename__ = ConnectionRequest.collection

    user_id = Column(String, nullable=False, index=True)
    mentor_id = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, index=True)


class MentorshipPreferencesRow(DocumentColumns, Base):
    __tablename__ = MentorshipPreferences.collection

    user_id = Column(String, nullable=False, unique=True)


class InterviewSessionRow(DocumentColumns, Base):
    __tablename__ = InterviewSession.collection

    user_id = Column(String, nullable=False, index=True)


class InterviewAnalyticsRow(DocumentColumns, Base):
    __tablename__ = InterviewAnalytics.collection

    user_id = Column(String, nullable=False, unique=True)


ROW_TYPES: Dict[Type[Document], Any] = {
    User: UserRow,
    CareerProfile: CareerProfileRow,
    UserProfile: UserProfileRow,
    Story: StoryRow,
    Project: ProjectRow,
    Mentorship: MentorshipRow,
    ConnectionRequest: ConnectionRequestRow,
    MentorshipPreferences: MentorshipPreferencesRow,
    InterviewSession: InterviewSessionRow,
    InterviewAnalytics: InterviewAnalyticsRow,
}


def _row_type(doc_type: Type[Document]):
    try:
        return ROW_TYPES[doc_type]
    except KeyError:
        raise ValueError(f"No table registered for {doc_type.__name__}") from None


def find_statement(doc_type: Type[Document], filters: Dict[str, Any]):
    """Build the SELECT used by `SqlDbClient.find` (newest first)."""
    row_type = _row_type(doc_type)
    stmt = select(row_type)
    for name, value in _check_filters(doc_type, filters).items():
        stmt = stmt.where(getattr(row_type, name) == value)
    return stmt.order_by(row_type.created_at.desc())


def _duplicate_key(doc: Document, exc: IntegrityError) -> DuplicateKeyError:
    message = str(exc.orig)
    for key in doc.unique_fields:
        if key in message:
            return DuplicateKeyError(doc.collection, key)
    return DuplicateKeyError(doc.collection, ",".join(doc.unique_fields) or "id")


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Each document is stored whole in a JSON column; the key fields are copied
    into indexed columns so filters and unique constraints run in the database.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @staticmethod
    def _apply(row, doc: Document) -> None:
        for name, value in doc.key_values().items():
            setattr(row, name, value)
        row.search_text = doc.search_text()
        row.data = doc.model_dump(mode="json")
        row.created_at = doc.created_at.timestamp()
        row.updated_at = doc.updated_at.timestamp()

    @staticmethod
    def _to_doc(doc_type: Type[D], row) -> D:
        return doc_type.model_validate(row.data)

    def _commit(self, session: Session, doc: Document) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise _duplicate_key(doc, exc) from exc

    def insert(self, doc: D) -> D:
        row = _row_type(type(doc))(id=doc.id)
        self._apply(row, doc)
        with self.Session() as session:
            session.add(row)
            self._commit(session, doc)
        return doc

    def get(self, doc_type: Type[D], doc_id: str) -> Optional[D]:
        with self.Session() as session:
            row = session.get(_row_type(doc_type), doc_id)
            if not row:
                return None
            return self._to_doc(doc_type, row)

    def find(
        self,
        doc_type: Type[D],
        *,
        limit: Optional[int] = None,
        offset: int = 0,
        **filters: Any,
    ) -> list[D]:
        stmt = find_statement(doc_type, filters).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self.Session() as session:
            rows = session.execute(stmt).scalars().all()
            return [self._to_doc(doc_type, row) for row in rows]

    def count(self, doc_type: Type[D], **filters: Any) -> int:
        row_type = _row_type(doc_type)
        stmt = select(func.count()).select_from(row_type)
        for name, value in _check_filters(doc_type, filters).items():
            stmt = stmt.where(getattr(row_type, name) == value)
        with self.Session() as session:
            return session.execute(stmt).scalar_one()

    def search(
        self, doc_type: Type[D], query: str, *, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[D]:
        row_type = _row_type(doc_type)
        stmt = select(row_type)
        for term in _search_terms(query):
            stmt = stmt.where(row_type.search_text.contains(term, autoescape=True))
        stmt = stmt.order_by(row_type.created_at.desc()).limit(limit)
        with self.Session() as session:
            rows = session.execute(stmt).scalars().all()
            return [self._to_doc(doc_type, row) for row in rows]

    def update(
        self, doc_type: Type[D], doc_id: str, changes: Dict[str, Any]
    ) -> Optional[D]:
        with self.Session() as session:
            row = session.get(_row_type(doc_type), doc_id)
            if not row:
                return None
            updated = self._to_doc(doc_type, row).with_changes(changes)
            self._apply(row, updated)
            self._commit(session, updated)
            return updated

    def delete(self, doc_type: Type[Document], doc_id: str) -> bool:
        with self.Session() as session:
            row = session.get(_row_type(doc_type), doc_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def list_collections(self) -> list[str]:
        return sorted(inspect(self.engine).get_table_names())
