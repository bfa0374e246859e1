"""
Context Data Models

스코프 컨텍스트 추출 관련 데이터 모델들
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from pydantic import BaseModel, validator


class ScopeKind(Enum):
    """둘러싼 노드의 종류"""
    DEFINITION = "definition"
    BLOCK = "block"


class ContextStrategy(Enum):
    """파일 컨텍스트 생성에 사용된 전략"""
    SCOPE = "scope"
    EXPANDED = "expanded"
    RAW = "raw"


@dataclass(frozen=True)
class EnclosingContext:
    """변경 범위를 감싸는 가장 작은 구문 노드 (라인 번호는 1부터, 양끝 포함)"""
    kind: ScopeKind
    node_type: str
    start_line: int
    end_line: int
    text: str
    name: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if self.start_line <= 0 or self.end_line <= 0:
            raise ValueError("Line numbers must be positive")
        if self.start_line > self.end_line:
            raise ValueError("start_line cannot be greater than end_line")

    @property
    def key(self) -> str:
        """스코프 그룹핑 키"""
        return scope_key(self.start_line, self.end_line)

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def contains(self, other: "EnclosingContext") -> bool:
        """다른 스코프가 이 스코프 안에 포함되는지 확인"""
        return self.start_line <= other.start_line and other.end_line <= self.end_line


def scope_key(start_line: int, end_line: int) -> str:
    """라인 범위로 ScopeKey 생성"""
    return f"{start_line} -> {end_line}"


@dataclass(frozen=True)
class ValidityResult:
    """구문 유효성 검사 결과"""
    valid: bool
    error: str = ""


@dataclass
class PRFile:
    """PR에서 변경된 파일 하나의 입력 데이터"""
    filename: str
    patch: str
    old_contents: str = ""
    current_contents: str = ""
    status: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if not self.filename or not self.filename.strip():
            raise ValueError("Filename cannot be empty")


@dataclass
class FileContext:
    """파일 하나에 대한 리뷰 컨텍스트 결과"""
    filename: str
    strategy: ContextStrategy
    content: str
    scope_blocks: int = 0
    fallback_blocks: int = 0
    estimated_tokens: int = 0
    error: Optional[str] = None

    def __post_init__(self):
        """데이터 검증"""
        if self.scope_blocks < 0 or self.fallback_blocks < 0:
            raise ValueError("Block counts must be non-negative")


# Pydantic models for API validation
class PRFileRequest(BaseModel):
    """API 요청용 PRFile 모델"""
    filename: str
    patch: str
    old_contents: str = ""
    current_contents: str = ""
    status: Optional[str] = None

    @validator('filename')
    def validate_filename(cls, v):
        if not v.strip():
            raise ValueError('Filename cannot be empty')
        return v

    @validator('status')
    def validate_status(cls, v):
        if v is not None and v not in {'added', 'removed', 'modified', 'renamed', 'copied', 'changed', 'unchanged'}:
            raise ValueError('Invalid file status')
        return v

    def to_pr_file(self) -> PRFile:
        return PRFile(
            filename=self.filename,
            patch=self.patch,
            old_contents=self.old_contents,
            current_contents=self.current_contents,
            status=self.status,
        )
