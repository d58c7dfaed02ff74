"""Project memory persistence and per-requester serialization."""

import logging
import threading
from contextlib import contextmanager

from sqlalchemy import Column, String, Text, create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from config.defaults import DEFAULTS
from core.state import ProjectMemory, deserialize_artifacts, serialize_artifacts

logger = logging.getLogger(__name__)

Base = declarative_base()


class UserState(Base):
    """One row per requester. Columns are only ever added, never dropped."""

    __tablename__ = "user_states"

    user_id = Column(String, primary_key=True)
    last_response = Column(Text)     # serialized artifact JSON
    last_prompt = Column(Text)
    last_plan = Column(Text)


class ProjectMemoryStore:
    """Keyed load/store of ProjectMemory backed by SQLAlchemy.

    put() is an upsert: the whole row is replaced, never appended to.
    """

    def __init__(self, database_url=None, engine=None):
        self.database_url = database_url or DEFAULTS["database_url"]
        self.engine = engine or create_engine(self.database_url)
        self.SessionFactory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._ready = False
        self._init_lock = threading.Lock()

    @property
    def backend(self):
        return self.engine.dialect.name

    def init_db(self):
        """Create the table, then add any text columns an older schema lacks."""
        with self._init_lock:
            if self._ready:
                return
            Base.metadata.create_all(self.engine)
            existing = {c["name"] for c in inspect(self.engine).get_columns(UserState.__tablename__)}
            with self.engine.begin() as conn:
                for column in UserState.__table__.columns:
                    if column.name not in existing:
                        logger.info("Adding missing column user_states.%s", column.name)
                        conn.execute(text(f"ALTER TABLE user_states ADD COLUMN {column.name} TEXT"))
            self._ready = True
            logger.info("Project memory ready (%s)", self.backend)

    def get(self, requester_id):
        """Return the requester's ProjectMemory, or None."""
        self.init_db()
        session = self.SessionFactory()
        try:
            row = session.get(UserState, str(requester_id))
            if row is None:
                return None
            return ProjectMemory(
                last_prompt=row.last_prompt or "",
                last_artifacts=deserialize_artifacts(row.last_response),
                last_plan=row.last_plan,
            )
        finally:
            session.close()

    def put(self, requester_id, memory: ProjectMemory):
        """Insert or replace the requester's row."""
        self.init_db()
        session = self.SessionFactory()
        try:
            session.merge(UserState(
                user_id=str(requester_id),
                last_response=serialize_artifacts(memory.last_artifacts),
                last_prompt=memory.last_prompt,
                last_plan=memory.last_plan,
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


class RequesterLocks:
    """One lock per requester id, so a requester's commands run one at a time."""

    def __init__(self):
        # requester id -> [lock, number of holders and waiters]
        self._locks = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, requester_id):
        key = str(requester_id)
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]
