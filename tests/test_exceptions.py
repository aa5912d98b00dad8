"""
Registrar Backend: Exception Hierarchy Tests
=============================================

What:  Each exception carries an ErrorKind, and the status table maps
       kinds (not classes) to HTTP codes.
"""

from registrar.exceptions import (
    ConflictError,
    DatabaseError,
    ErrorKind,
    NotFoundError,
    RegistrarError,
    ValidationError,
    status_for,
)


class TestErrorKinds:

    def test_status_table(self):
        assert status_for(ErrorKind.VALIDATION) == 400
        assert status_for(ErrorKind.NOT_FOUND) == 404
        assert status_for(ErrorKind.CONFLICT) == 409
        assert status_for(ErrorKind.STORE_FAILURE) == 500
        assert status_for(ErrorKind.INTERNAL) == 500

    def test_each_exception_reports_its_kind(self):
        cases = [
            (ValidationError(field="email"), ErrorKind.VALIDATION, 400),
            (NotFoundError(resource="Course", resource_id="c1"), ErrorKind.NOT_FOUND, 404),
            (ConflictError(field="name"), ErrorKind.CONFLICT, 409),
            (DatabaseError(), ErrorKind.STORE_FAILURE, 500),
            (RegistrarError(), ErrorKind.INTERNAL, 500),
        ]
        for exc, kind, status in cases:
            assert exc.kind is kind
            assert exc.status_code == status

    def test_not_found_message_names_resource_and_id(self):
        exc = NotFoundError(resource="Student", resource_id="s1")

        assert exc.message == "Student with ID 's1' was not found"
        assert exc.context == {"resource": "Student", "resource_id": "s1"}

    def test_not_found_without_id(self):
        assert NotFoundError(resource="Course").message == "The requested course was not found"

    def test_field_is_recorded_in_context(self):
        assert ValidationError("bad", field="email").context == {"field": "email"}
        assert ConflictError("dup", field="student_code").field == "student_code"
