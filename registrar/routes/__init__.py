# Routes package init
"""
Registrar Backend: API Routes Package
======================================

Route Inventory:
    - students.py: /students               (CRUD, ?name= search)
                   /students/course/{id}   (students listing a course)
                   /students/{id}/courses  (enrolled courses, leave)
    - courses.py:  /courses                (CRUD, /courses/topic?name=)
                   /courses/{id}/students  (roster, assign, remove)
    - health.py:   GET /health

Routes stay thin: parse the request, call a service, pick the status code.
"""
