import sys
from pathlib import Path
import time
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from leapboard.db.base import Base
from leapboard.db import session as session_module

# Import models so that they are registered in Base.metadata before create_all.
import leapboard.models  # noqa: F401


class _MemoryRedis:
    def __init__(self):
        self._data: dict[str, tuple[str, float | None]] = {}

    def ping(self):
        return True

    def _now(self) -> float:
        return time.time()

    def _get_entry(self, key: str):
        v = self._data.get(key)
        if not v:
            return None
        value, exp = v
        if exp is not None and exp <= self._now():
            self._data.pop(key, None)
            return None
        return value, exp

    def get(self, key: str):
        entry = self._get_entry(key)
        return entry[0] if entry else None

    def incr(self, key: str):
        return self.incrby(key, 1)

    def incrby(self, key: str, amount: int):
        cur = self.get(key)
        n = int(cur or 0) + int(amount)
        _, exp = self._data.get(key, ("", None))
        self._data[key] = (str(n), exp)
        return n

    def expire(self, key: str, seconds: int):
        entry = self._get_entry(key)
        if not entry:
            return False
        value, _ = entry
        self._data[key] = (value, self._now() + int(seconds))
        return True

    def ttl(self, key: str):
        entry = self._get_entry(key)
        if not entry:
            return -2
        _, exp = entry
        if exp is None:
            return -1
        return max(0, int(exp - self._now()))

    def flushall(self):
        self._data.clear()
        return True


# Configure test DB (SQLite in-memory) at import time so all tests importing
# leapboard.db.session.SessionLocal will get the patched version.
_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
Base.metadata.create_all(bind=_engine)
session_module.engine = _engine
session_module.SessionLocal = session_module.sessionmaker(autocommit=False, autoflush=False, bind=_engine)


# Stub Redis at import time (rate limiting + readiness).
_mem_redis = _MemoryRedis()
import leapboard.core.redis_client as redis_client_module

redis_client_module.get_redis = lambda: _mem_redis

from leapboard.main import create_app


@pytest.fixture(scope="session")
def client():
    app = create_app()

    # Ensure app dependencies use our session factory.
    def _get_db_override():
        db = session_module.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[session_module.get_db] = _get_db_override
    return TestClient(app)


@pytest.fixture()
def db():
    with session_module.SessionLocal() as session:
        yield session


@pytest.fixture()
def memory_redis():
    _mem_redis.flushall()
    return _mem_redis


def make_token(subject: str, *, email: str | None = None, role: str | None = None) -> str:
    from leapboard.core.config import settings

    claims = {
        "sub": subject,
        "iss": settings.jwt_issuer,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=30),
    }
    if email:
        claims["email"] = email
    if role:
        claims["role"] = role
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture()
def admin_headers():
    return {"Authorization": f"Bearer {make_token('admin-uid', role='admin')}"}


@pytest.fixture()
def token_for():
    return make_token


@pytest.fixture()
def world():
    """A self-contained registry: two schools in one district, four students and one quiz.

    Every id carries a random suffix because the in-memory database is shared
    by the whole test session.
    """
    import uuid
    from types import SimpleNamespace

    from leapboard.models.content import ContentKind, TargetedContent
    from leapboard.models.registry import School, State, Student

    s = uuid.uuid4().hex[:8]
    w = SimpleNamespace(suffix=s)
    w.state_id = f"st-{s}"
    w.other_state_id = f"st2-{s}"
    w.state_name = f"State {s}"
    w.district_code = f"GNT{s}".upper()
    w.school_id = f"sch-{s}"
    w.school_code = f"SUN{s}".upper()
    w.school_name = f"Sunrise {s}"
    w.other_school_id = f"sch2-{s}"
    w.other_school_code = f"HIL{s}".upper()
    w.quiz_id = f"quiz-{s}"

    w.asha = SimpleNamespace(id=f"doc-asha-{s}", auth_id=f"uid-asha-{s}", email=f"asha-{s}@example.com", student_id=f"AS{s}".upper())
    w.ravi = SimpleNamespace(id=f"doc-ravi-{s}", auth_id=f"uid-ravi-{s}", email=f"ravi-{s}@example.com", student_id=f"RV{s}".upper())
    w.meena = SimpleNamespace(id=f"doc-meena-{s}", auth_id=None, email=None, student_id=f"ME{s}".upper())
    w.hari = SimpleNamespace(id=f"doc-hari-{s}", auth_id=f"uid-hari-{s}", email=None, student_id=f"HR{s}".upper())

    with session_module.SessionLocal() as db:
        db.add_all(
            [
                State(
                    id=w.state_id,
                    state_name=w.state_name,
                    state_code="AP",
                    districts=[{"districtName": "Guntur", "districtCode": w.district_code}],
                ),
                State(id=w.other_state_id, state_name=f"Other {s}", state_code="TS", districts=[]),
                School(
                    id=w.school_id,
                    name=w.school_name,
                    school_code=w.school_code,
                    district_code=w.district_code,
                    district_name="Guntur",
                    state=w.state_name,
                ),
                School(
                    id=w.other_school_id,
                    name=f"Hillside {s}",
                    school_code=w.other_school_code,
                    district_code=w.district_code,
                    district_name="Guntur",
                    state=w.state_name,
                ),
                Student(
                    id=w.asha.id,
                    auth_id=w.asha.auth_id,
                    email=w.asha.email,
                    student_id=w.asha.student_id,
                    name="Asha",
                    school_code=w.school_code,
                    school_name=w.school_name,
                    district_code=w.district_code,
                    district_name="Guntur",
                    state=w.state_name,
                ),
                # Legacy row: only the free-text school name, no code or district name.
                Student(
                    id=w.ravi.id,
                    auth_id=w.ravi.auth_id,
                    email=w.ravi.email,
                    student_id=w.ravi.student_id,
                    name="Ravi",
                    school=w.school_name,
                    district_code=w.district_code,
                    state=w.state_name,
                ),
                # Never signed in: reachable only through the synthetic email.
                Student(
                    id=w.meena.id,
                    student_id=w.meena.student_id,
                    name="Meena",
                    school_code=w.school_code,
                    district_code=w.district_code,
                    state=w.state_name,
                ),
                Student(
                    id=w.hari.id,
                    auth_id=w.hari.auth_id,
                    student_id=w.hari.student_id,
                    name="Hari",
                    school_code=w.other_school_code,
                    district_code=w.district_code,
                    state=w.state_name,
                ),
                TargetedContent(id=w.quiz_id, kind=ContentKind.quiz, title="Weekly challenge", target_type="all"),
            ]
        )
        db.commit()
    return w
