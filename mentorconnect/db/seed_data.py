"""
Database Seed Data Module

Mock students and alumni for local development, plus a handful of pending
requests and accepted connections between them.

Run with:
    python -m mentorconnect.db.seed_data                       # 20 students, 20 alumni
    python -m mentorconnect.db.seed_data --students 50 --alumni 30
    python -m mentorconnect.db.seed_data --clear
"""
import argparse
import asyncio
import random
from datetime import timedelta
from typing import List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from mentorconnect.core.constants import COURSES, SKILLS_AND_FIELDS, UNIVERSITIES_SAMPLE
from mentorconnect.core.database import get_session_local, init_db
from mentorconnect.core.security import get_password_hash
from mentorconnect.core.types import utc_now
from mentorconnect.models.conversation import Conversation, Message
from mentorconnect.models.user import User, UserRole
from mentorconnect.services.connection_service import ConnectionService


DEFAULT_PASSWORD = "Password123!"

FIRST_NAMES = [
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph",
    "Jessica", "Thomas", "Sarah", "Charles", "Karen",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin",
]

FIVE_YEARS_MINUTES = 60 * 24 * 365 * 5


def _random_person(index: int, suffix: str):
    first, last = random.choice(FIRST_NAMES), random.choice(LAST_NAMES)
    email = f"{first.lower()}.{last.lower()}{suffix}{index}@example.com"
    return f"{first} {last}", email


def _contact_no() -> str:
    return f"+1-555-{random.randint(1000000, 9999999)}"


def generate_mock_alumni(count: int, password_hash: str) -> List[User]:
    """Profile-complete alumni with random field, university and join date"""
    alumni = []
    for i in range(count):
        full_name, email = _random_person(i, "")
        field = random.choice(SKILLS_AND_FIELDS)
        university = random.choice(UNIVERSITIES_SAMPLE)
        alumni.append(User(
            email=email,
            hashed_password=password_hash,
            full_name=full_name,
            role=UserRole.ALUMNI,
            is_profile_complete=True,
            contact_no=_contact_no(),
            address=f"{100 + i} Alumni Ave, City {i % 10}",
            pass_out_university=university,
            working_field=field,
            bio=(
                f"Experienced {field} professional with a passion for mentoring. "
                f"Graduated from {university} and currently leading a team at Tech Corp {i}."
            ),
            my_mentors=[],
            my_mentees=[],
            pending_mentee_requests=[],
            created_at=utc_now() - timedelta(minutes=random.randint(0, FIVE_YEARS_MINUTES)),
        ))
    return alumni


def generate_mock_students(count: int, password_hash: str) -> List[User]:
    """Profile-complete students with random course, field and university"""
    students = []
    for i in range(count):
        full_name, email = _random_person(i, "_student")
        students.append(User(
            email=email,
            hashed_password=password_hash,
            full_name=full_name,
            role=UserRole.STUDENT,
            is_profile_complete=True,
            contact_no=_contact_no(),
            address=f"{200 + i} Student St, Town {i % 10}",
            university=random.choice(UNIVERSITIES_SAMPLE),
            field_of_interest=random.choice(SKILLS_AND_FIELDS),
            pursuing_course=random.choice(COURSES),
            my_mentors=[],
            my_mentees=[],
            pending_mentee_requests=[],
            created_at=utc_now() - timedelta(minutes=random.randint(0, FIVE_YEARS_MINUTES)),
        ))
    return students


async def seed_connections(db: AsyncSession, students: List[User], alumni: List[User]) -> dict:
    """Each student requests up to two alumni; about half of the requests get accepted"""
    service = ConnectionService(db, legacy_asymmetric=False)
    stats = {"requested": 0, "accepted": 0}
    if not alumni:
        return stats

    for student in students:
        for alumnus in random.sample(alumni, k=min(2, len(alumni))):
            outcome = await service.request_connection(str(student.id), str(alumnus.id))
            if not outcome.changed:
                continue
            stats["requested"] += 1
            if random.random() < 0.5:
                await service.accept_request(str(alumnus.id), str(student.id))
                stats["accepted"] += 1
    return stats


async def seed_all(students: int = 20, alumni: int = 20):
    """Seed the database with mock users and connections"""
    await init_db()
    password_hash = get_password_hash(DEFAULT_PASSWORD)

    async with get_session_local()() as db:
        try:
            student_rows = generate_mock_students(students, password_hash)
            alumni_rows = generate_mock_alumni(alumni, password_hash)
            db.add_all(student_rows + alumni_rows)
            await db.commit()
            print(f"Created {len(student_rows)} students and {len(alumni_rows)} alumni")

            stats = await seed_connections(db, student_rows, alumni_rows)
            print(f"Sent {stats['requested']} requests, accepted {stats['accepted']}")
            print("=" * 50)
            print(f"Every seeded account uses the password: {DEFAULT_PASSWORD}")
            print("=" * 50)
        except Exception as e:
            await db.rollback()
            print(f"Error seeding database: {e}")
            raise


async def clear_all():
    """Clear all data from database"""
    print("Clearing all data...")
    async with get_session_local()() as db:
        await db.execute(delete(Message))
        await db.execute(delete(Conversation))
        await db.execute(delete(User))
        await db.commit()
    print("All data cleared!")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed MentorConnect with mock data")
    parser.add_argument("--students", type=int, default=20, help="number of students to create")
    parser.add_argument("--alumni", type=int, default=20, help="number of alumni to create")
    parser.add_argument("--clear", action="store_true", help="delete all data instead of seeding")
    args = parser.parse_args(argv)

    if args.clear:
        asyncio.run(clear_all())
    else:
        asyncio.run(seed_all(args.students, args.alumni))


if __name__ == "__main__":
    main()
