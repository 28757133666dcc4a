"""Endpoint modules, one router each."""
