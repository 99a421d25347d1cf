"""Blueprints: server-rendered pages and the JSON API."""
