# Schemas package init
"""
StackIt Backend — Pydantic Schemas
====================================

What:  API contracts, kept separate from the ORM models so the wire format
       (camelCase, public vs. admin views) can evolve independently of the
       table layout.
"""
