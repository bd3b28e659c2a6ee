"""Seed the database with demo users and courses.

Usage:
    python -m backend.seed

Every row is inserted only when its natural key (user email, course id) is
not already taken, so the script can be run any number of times.
"""
import logging
import sys
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from backend.auth.security import hash_password
from backend.core.logging_config import setup_logging
from backend.database import SessionLocal, engine, init_db
from backend.models.course import Course
from backend.models.user import Role, User

logger = logging.getLogger(__name__)

TEACHER_PASSWORD = "teacher123"
STUDENT_PASSWORD = "student123"

TEACHER = {
    "email": "teacher@englishpro.com",
    "name": "Demo Teacher",
    "role": Role.TEACHER,
}

STUDENTS = [
    {
        "email": "student1@englishpro.com",
        "name": "Alice Student",
        "role": Role.STUDENT,
    },
    {
        "email": "student2@englishpro.com",
        "name": "Bob Student",
        "role": Role.STUDENT,
    },
]

COURSES = [
    {
        "id": "course-beginner-english",
        "title": "Beginner English",
        "description": "Learn the basics of English language including greetings, numbers, and common phrases.",
    },
    {
        "id": "course-business-english",
        "title": "Business English",
        "description": "English for professional environments including meetings, presentations, and email communication.",
    },
    {
        "id": "course-conversation-practice",
        "title": "Conversation Practice",
        "description": "Improve your speaking skills through interactive conversation exercises.",
    },
]

_DIALECT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


@dataclass
class SeedSummary:
    users: list[User] = field(default_factory=list)
    courses: list[Course] = field(default_factory=list)


def insert_if_absent(db: Session, model, values: dict, key: str) -> tuple:
    """Insert ``values`` unless a row with the same ``key`` exists.

    Returns the stored row and whether this call created it. An existing row
    is returned untouched.
    """
    dialect = db.get_bind().dialect.name
    dialect_insert = _DIALECT_INSERTS.get(dialect)
    if dialect_insert is None:
        raise RuntimeError(f"Conditional insert is not supported for the '{dialect}' dialect.")

    statement = dialect_insert(model).values(**values).on_conflict_do_nothing(index_elements=[key])
    result = db.execute(statement)
    created = result.rowcount == 1

    key_column = getattr(model, key)
    row = db.execute(select(model).where(key_column == values[key])).scalar_one()
    return row, created


def _log_outcome(kind: str, label: str, created: bool) -> None:
    if created:
        logger.info("Created %s: %s", kind, label)
    else:
        logger.info("%s already exists: %s", kind.capitalize(), label)


def seed_database(db: Session) -> SeedSummary:
    summary = SeedSummary()

    teacher_hash = hash_password(TEACHER_PASSWORD)
    teacher, created = insert_if_absent(db, User, {**TEACHER, "password_hash": teacher_hash}, "email")
    _log_outcome("teacher", teacher.email, created)
    summary.users.append(teacher)

    student_hash = hash_password(STUDENT_PASSWORD)
    for student_values in STUDENTS:
        student, created = insert_if_absent(db, User, {**student_values, "password_hash": student_hash}, "email")
        _log_outcome("student", student.email, created)
        summary.users.append(student)

    for course_values in COURSES:
        course, created = insert_if_absent(db, Course, {**course_values, "teacher_id": teacher.id}, "id")
        _log_outcome("course", course.title, created)
        summary.courses.append(course)

    db.commit()

    logger.info("=== Sample Login Credentials ===")
    logger.info("Teacher: %s / %s", TEACHER["email"], TEACHER_PASSWORD)
    for student_values in STUDENTS:
        logger.info("Student: %s / %s", student_values["email"], STUDENT_PASSWORD)

    return summary


def main() -> None:
    setup_logging()
    logger.info("Seeding database...")

    db = SessionLocal()
    try:
        init_db()
        seed_database(db)
        logger.info("Database seeding complete!")
    except Exception:
        logger.exception("Database seeding failed.")
        sys.exit(1)
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    main()
