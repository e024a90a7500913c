"""Authentication and authorization.

Two ways to prove who you are:
1. Email + local password → session JWT
2. Google ID token (verified against Google's key set) → session JWT

Every protected route then resolves the session JWT to a CurrentIdentity
through the shared dependency in pathix.auth.dependencies.
"""
