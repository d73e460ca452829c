# Services package init
"""
StackIt Backend — Services Layer
==================================

What:  Business rules, between routes (HTTP) and models (persistence).
How:   Each service is a stateless singleton whose methods take the request's
       AsyncSession and, for mutations, the authenticated actor explicitly.
       Nothing reads ambient request state.

Service Inventory:
    - auth_service:          registration, login, JWT issue/verify
    - vote_engine:           apply_vote() for questions and answers
    - question_service:      question listing, detail, authoring, voting, tags
    - answer_service:        answers, comments, acceptance workflow
    - notification_service:  fan-out writes and the recipient read model
    - realtime:              NotificationHub (WebSocket push by recipient id)
    - user_service:          profiles, activity, search, leaderboard
    - admin_service:         moderation and reports
"""
