# Routes package init
"""
GAD Backend — API Routes Package
=================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource.

Route Inventory:
    - students.py:   /api/v1/students    (student CRUD, lookups, activation)
    - role_tags.py:  /api/v1/role-tags   (role tag CRUD, filters, activation)
    - users.py:      /api/v1/users       (user CRUD, lookups, role assignment)
    - health.py:     GET /health         (service health check)

Design Principle:
    Routes are thin. They extract request data, call a service and set
    status codes/headers. Business rules live in gad.services.
"""
