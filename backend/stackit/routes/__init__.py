# Routes package init
"""
StackIt Backend — API Routes Package
======================================

What:  HTTP and WebSocket handlers.

Route Inventory:
    - auth.py:           /api/auth/register, /api/auth/login, /api/auth/me
    - questions.py:      /api/questions ...
    - answers.py:        /api/answers ...
    - users.py:          /api/users ...
    - notifications.py:  /api/notifications ...
    - admin.py:          /api/admin ...
    - realtime.py:       WS /ws/notifications?token=<jwt>
    - health.py:         GET /health

Routes stay thin: parse the request, resolve the actor (deps.py), call one
service, shape the response. Business rules live in services.
"""
