# Services package init
"""
Registrar Backend: Services Layer
==================================

What:  Business logic between the routes (HTTP) and the document store.
How:   Stateless classes with module-level singletons. Every method receives
       the DocumentStore it should use, so tests can hand in a fresh one.

Service Inventory:
    - EnrollmentService: keeps student.course_refs and course.student_refs
      consistent (enroll, withdraw, cascading deletes, reference resolution)
    - StudentService: student CRUD and the student-side enrollment views
    - CourseService: course CRUD, topic search and the course-side commands
"""
