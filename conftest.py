import pytest
from rest_framework.test import APIClient

from school_notify.users.models import User
from tests.factories import create_user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_account(db):
    return create_user("principal", role=User.Role.ADMIN)


@pytest.fixture
def teacher(db):
    return create_user("teacher", role=User.Role.TEACHER, department="Science")


@pytest.fixture
def student(db):
    return create_user("student", role=User.Role.STUDENT, course="BSIT", year_level=2)


@pytest.fixture
def other_student(db):
    return create_user("student2", role=User.Role.STUDENT, email="student2@example.com")
