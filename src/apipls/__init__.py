"""Compile declarative resource models into a JSON:API CRUD service."""

__version__ = "0.1.0"
