"""Authentication and authorization.

Users authenticate with email/password and receive a JWT bearer token.
Every protected request resolves the token to a CurrentIdentity; the
policy module decides, from one role table, which operations (server) and
which views (client) that identity may use. Resource-scoped writes
additionally pass the owner-or-admin rule.
"""
