# Routes package init
"""
Postboard Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:    GET  /api/auth                             (current user)
                  POST /api/auth                             (login)
    - users.py:   POST /api/users                            (register)
    - posts.py:   POST/GET /api/posts, GET/DELETE /api/posts/{id},
                  PUT /api/posts/like/{id}, PUT /api/posts/unlike/{id},
                  POST /api/posts/comment/{id},
                  DELETE /api/posts/comment/{id}/{comment_id}
    - health.py:  GET  /health

Routes stay thin: resolve dependencies (session, identity), call the
service, return its result. Errors propagate to the handlers in main.py.
"""
