"""Machine-usable error codes carried in ``ServiceError.code``."""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    BAD_INPUT = "BAD_INPUT"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
