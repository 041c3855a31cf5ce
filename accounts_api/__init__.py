"""Accounts API: user registration, login and session tokens."""
