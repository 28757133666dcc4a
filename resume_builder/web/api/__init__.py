"""Routers and dependencies mounted under ``/api``."""
