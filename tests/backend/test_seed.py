from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from backend import seed
from backend.auth.security import verify_password
from backend.database import enable_sqlite_foreign_keys, init_db
from backend.models.course import Course
from backend.models.user import Role, User


@pytest.fixture
def seed_engine():
    engine = create_engine('sqlite:///:memory:')
    enable_sqlite_foreign_keys(engine)
    init_db(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def seed_db(seed_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=seed_engine)
    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()


def _count(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_seed_database_creates_demo_users_and_courses(seed_db) -> None:
    summary = seed.seed_database(seed_db)

    assert [user.email for user in summary.users] == [
        'teacher@englishpro.com',
        'student1@englishpro.com',
        'student2@englishpro.com',
    ]
    assert [course.id for course in summary.courses] == [
        'course-beginner-english',
        'course-business-english',
        'course-conversation-practice',
    ]
    assert summary.users[0].role == Role.TEACHER
    assert {user.role for user in summary.users[1:]} == {Role.STUDENT}
    assert summary.users[1].name == 'Alice Student'
    assert summary.courses[2].title == 'Conversation Practice'


def test_seed_database_is_idempotent(seed_db) -> None:
    first = seed.seed_database(seed_db)
    hashes = {user.email: user.password_hash for user in first.users}

    seed.seed_database(seed_db)
    seed_db.expire_all()

    assert _count(seed_db, User) == 3
    assert _count(seed_db, Course) == 3
    stored = {user.email: user.password_hash for user in seed_db.execute(select(User)).scalars()}
    assert stored == hashes


def test_seed_database_leaves_existing_rows_unchanged(seed_db) -> None:
    seed_db.add(User(email='teacher@englishpro.com', password_hash='kept-hash', name='Renamed Teacher', role=Role.TEACHER))
    seed_db.commit()

    summary = seed.seed_database(seed_db)

    teacher = summary.users[0]
    assert teacher.name == 'Renamed Teacher'
    assert teacher.password_hash == 'kept-hash'
    assert _count(seed_db, User) == 3


def test_seeded_password_hashes_verify_only_their_plaintext(seed_db) -> None:
    summary = seed.seed_database(seed_db)
    teacher, student1, student2 = summary.users

    assert verify_password('teacher123', teacher.password_hash)
    assert verify_password('student123', student1.password_hash)
    assert verify_password('student123', student2.password_hash)
    assert not verify_password('student123', teacher.password_hash)
    assert not verify_password('teacher123', student1.password_hash)
    assert not verify_password('Teacher123', teacher.password_hash)
    assert not verify_password('', student2.password_hash)


def test_seeded_courses_belong_to_seeded_teacher(seed_db) -> None:
    summary = seed.seed_database(seed_db)
    teacher = summary.users[0]

    courses = seed_db.execute(select(Course)).scalars().all()

    assert len(courses) == 3
    assert {course.teacher_id for course in courses} == {teacher.id}


def test_insert_if_absent_reports_whether_row_was_created(seed_db) -> None:
    values = {'email': 'someone@englishpro.com', 'password_hash': 'x', 'name': 'Someone', 'role': Role.STUDENT}

    first, first_created = seed.insert_if_absent(seed_db, User, values, 'email')
    second, second_created = seed.insert_if_absent(seed_db, User, {**values, 'name': 'Other'}, 'email')

    assert first_created is True
    assert second_created is False
    assert second.id == first.id
    assert second.name == 'Someone'


def test_course_with_unknown_teacher_is_rejected(seed_db) -> None:
    seed_db.add(Course(id='course-orphan', teacher_id=99999, title='Orphan Course'))

    with pytest.raises(IntegrityError):
        seed_db.commit()


def test_insert_if_absent_rejects_course_with_unknown_teacher(seed_db) -> None:
    values = {'id': 'course-orphan', 'teacher_id': 99999, 'title': 'Orphan Course'}

    with pytest.raises(IntegrityError):
        seed.insert_if_absent(seed_db, Course, values, 'id')


def test_insert_if_absent_rejects_unsupported_dialect() -> None:
    fake_db = SimpleNamespace(get_bind=lambda: SimpleNamespace(dialect=SimpleNamespace(name='mysql')))

    with pytest.raises(RuntimeError) as exception_info:
        seed.insert_if_absent(fake_db, User, {'email': 'a@b.c'}, 'email')

    assert "'mysql'" in str(exception_info.value)


def test_seed_database_logs_each_entity(seed_db, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level('INFO', logger='backend.seed')

    seed.seed_database(seed_db)
    seed.seed_database(seed_db)

    assert 'Created teacher: teacher@englishpro.com' in caplog.messages
    assert 'Created course: Business English' in caplog.messages
    assert 'Student already exists: student2@englishpro.com' in caplog.messages
    assert 'Teacher: teacher@englishpro.com / teacher123' in caplog.messages


class _TrackingSession:
    def __init__(self) -> None:
        self.closed = False

    def rollback(self) -> None:
        raise RuntimeError('connection already closed')

    def close(self) -> None:
        self.closed = True


def _patch_main(monkeypatch: pytest.MonkeyPatch, session: _TrackingSession, seed_database) -> SimpleNamespace:
    engine = SimpleNamespace(disposed=False)
    engine.dispose = lambda: setattr(engine, 'disposed', True)
    monkeypatch.setattr('backend.seed.setup_logging', lambda: None)
    monkeypatch.setattr('backend.seed.SessionLocal', lambda: session)
    monkeypatch.setattr('backend.seed.init_db', lambda: None)
    monkeypatch.setattr('backend.seed.engine', engine)
    monkeypatch.setattr('backend.seed.seed_database', seed_database)
    return engine


def test_main_exits_with_status_one_and_releases_connection_on_failure(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    session = _TrackingSession()

    def failing_seed(_db):
        raise RuntimeError('database unavailable')

    engine = _patch_main(monkeypatch, session, failing_seed)

    with pytest.raises(SystemExit) as exit_info:
        seed.main()

    assert exit_info.value.code == 1
    failures = [record for record in caplog.records if record.getMessage() == 'Database seeding failed.']
    assert len(failures) == 1
    assert str(failures[0].exc_info[1]) == 'database unavailable'
    assert session.closed
    assert engine.disposed


def test_main_releases_connection_on_success(monkeypatch: pytest.MonkeyPatch) -> None:
    session = _TrackingSession()
    calls = []
    engine = _patch_main(monkeypatch, session, calls.append)

    seed.main()

    assert calls == [session]
    assert session.closed
    assert engine.disposed
