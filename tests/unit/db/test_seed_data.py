"""
Unit Tests for the mock data generators
"""
from mentorconnect.core.constants import COURSES, SKILLS_AND_FIELDS, UNIVERSITIES_SAMPLE
from mentorconnect.db.seed_data import generate_mock_alumni, generate_mock_students, seed_connections
from mentorconnect.models.user import UserRole
from mentorconnect.services.connection_service import derive_state
from mentorconnect.schemas.connection import ConnectionState


def test_mock_alumni_are_directory_ready():
    alumni = generate_mock_alumni(5, "hash")

    assert len(alumni) == 5
    for alumnus in alumni:
        assert alumnus.role == UserRole.ALUMNI
        assert alumnus.is_profile_complete is True
        assert alumnus.working_field in SKILLS_AND_FIELDS
        assert alumnus.pass_out_university in UNIVERSITIES_SAMPLE


def test_mock_students_fields():
    students = generate_mock_students(5, "hash")

    assert len({s.email for s in students}) == 5
    for student in students:
        assert student.role == UserRole.STUDENT
        assert student.pursuing_course in COURSES


async def test_seed_connections_leave_pairs_consistent(db_session):
    students = generate_mock_students(4, "hash")
    alumni = generate_mock_alumni(3, "hash")
    db_session.add_all(students + alumni)
    await db_session.commit()

    stats = await seed_connections(db_session, students, alumni)

    assert stats["requested"] == 8
    for student in students:
        for alumnus in alumni:
            await db_session.refresh(student)
            await db_session.refresh(alumnus)
            state = derive_state(student, alumnus)
            if state == ConnectionState.CONNECTED:
                assert alumnus.id in student.my_mentors
                assert student.id in alumnus.my_mentees
