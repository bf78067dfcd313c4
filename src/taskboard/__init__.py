"""Taskboard — multi-user task tracking backend.

Users register and log in with email/password, receive a signed bearer
token, and manage their own tasks (create, list, update, delete) ordered
by an opaque sort key.
"""

__version__ = "0.1.0"
