# Models package init
"""
Importing this package registers every table with `Base.metadata`
(used by Alembic autogenerate and by the test suite's create_all).
"""

from gad.models.role_tag import RoleTag
from gad.models.student import Student
from gad.models.user import Assignment, User

__all__ = ["Assignment", "RoleTag", "Student", "User"]
