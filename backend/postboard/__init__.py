"""
Postboard Backend — Application Package Initializer
=====================================================

A REST backend for a social-post application: token authentication plus
post, like and comment management.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Routes + Auth Guard (API)       │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← ownership checks, list rules
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │       Database (Persistence)        │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
