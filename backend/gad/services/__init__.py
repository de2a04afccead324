# Services package init
"""
GAD Backend — Services Layer
=============================

What:  Business logic layer sitting between routes (HTTP) and repositories (SQL).
Why:   Separation of concerns. Routes handle HTTP, services handle business
       rules (uniqueness, activation state, role assignment).
How:   Stateless singletons. Every method receives the request's AsyncSession,
       builds the repositories it needs, and returns response schemas.

Service Inventory:
    - StudentService: Student CRUD, lookups and activation
    - RoleTagService: RoleTag CRUD, filters, activation and startup seeding
    - UserService: User CRUD, lookups, activation, role assign/revoke
"""
