"""Roles carried in bearer tokens.

- STUDENT: buys offers and consumes content of its school
- ADMIN: manages the offers and promocodes of its school
"""

from enum import Enum


class UserRole(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"
