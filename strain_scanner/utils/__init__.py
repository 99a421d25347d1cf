"""Validation, upload and error helpers shared by routes and services."""
