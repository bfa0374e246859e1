"""
Data Models

AI PR Context 시스템의 핵심 데이터 모델들
"""

from .patch import DiffLine, Hunk, Patch, PatchSet
from .context import (
    ContextStrategy,
    EnclosingContext,
    FileContext,
    PRFile,
    PRFileRequest,
    ScopeKind,
    ValidityResult,
    scope_key,
)

__all__ = [
    "DiffLine",
    "Hunk",
    "Patch",
    "PatchSet",
    "ContextStrategy",
    "EnclosingContext",
    "FileContext",
    "PRFile",
    "PRFileRequest",
    "ScopeKind",
    "ValidityResult",
    "scope_key",
]
