"""Backing store module.

Provides the relational store query interface and its PostgreSQL
implementation.
"""

from .service import MemberStore, PostgresMemberStore, Row

__all__ = [
    "MemberStore",
    "PostgresMemberStore",
    "Row",
]
