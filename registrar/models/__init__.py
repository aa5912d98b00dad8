# Models package init
"""
Registrar Backend: ORM Models
==============================

Row shapes backing SqlDocumentStore. Importing this package registers both
tables on Base.metadata (needed by create_schema() and Alembic).
"""

from registrar.models.course import Course
from registrar.models.student import Student

__all__ = ["Course", "Student"]
