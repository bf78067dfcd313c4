"""Authentication and authorization.

Users authenticate with email/password and receive a signed JWT whose
subject is their email. Every protected request resolves that token back
to a stored user, and task mutations pass through the ownership guard.
"""
