"""Authentication and authorization.

Learn: Users register with email/password and log in to receive a
short-lived JWT access token. Every task route resolves that token to a
"current identity", and every task query is scoped to that identity.

- password.py: bcrypt hashing and verification
- jwt.py: token issuing and verification
- dependencies.py: the FastAPI dependency that gates protected routes
"""
