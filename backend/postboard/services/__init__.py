"""
Postboard Backend — Services Layer
====================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
Why:   Routes handle HTTP, services handle the rules: validation outcomes,
       ownership checks, and like/comment list mutations.
How:   Services take an AsyncSession plus already-validated schema objects
       and return response schemas. They raise exceptions from
       postboard.exceptions; they never build HTTP responses.

Service Inventory:
    - TokenService: Issues and verifies identity tokens
    - AuthService:  Login, registration, current-user lookup
    - PostService:  Post CRUD, likes, comments
"""
