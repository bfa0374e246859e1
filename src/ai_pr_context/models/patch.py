"""
Patch Data Models

Unified diff 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


LINE_MARKERS = {
    'context': ' ',
    'added': '+',
    'removed': '-',
}


@dataclass
class DiffLine:
    """hunk 안의 개별 라인"""
    type: str  # 'context', 'added', 'removed'
    content: str

    def __post_init__(self):
        """데이터 검증"""
        if self.type not in LINE_MARKERS:
            raise ValueError(f"Invalid line type: {self.type}")

    @property
    def is_edit(self) -> bool:
        """추가/삭제 라인 여부"""
        return self.type != 'context'

    @property
    def raw(self) -> str:
        """마커가 붙은 diff 라인"""
        return LINE_MARKERS[self.type] + self.content


@dataclass
class Hunk:
    """unified diff의 hunk 하나"""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: List[DiffLine] = field(default_factory=list)
    line_delimiters: List[str] = field(default_factory=list)

    def __post_init__(self):
        """데이터 검증"""
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_lines < 0 or self.new_lines < 0:
            raise ValueError("Line counts must be non-negative")

    @property
    def header(self) -> str:
        """hunk 헤더 문자열"""
        return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"

    @property
    def raw_lines(self) -> List[str]:
        """마커가 붙은 라인 목록"""
        return [line.raw for line in self.lines]

    @property
    def has_edits(self) -> bool:
        return any(line.is_edit for line in self.lines)

    @property
    def first_edit_index(self) -> int:
        """첫 번째 추가/삭제 라인의 인덱스 (없으면 -1)"""
        for idx, line in enumerate(self.lines):
            if line.is_edit:
                return idx
        return -1

    @property
    def last_edit_index(self) -> int:
        """마지막 추가/삭제 라인의 인덱스 (없으면 -1)"""
        for idx in range(len(self.lines) - 1, -1, -1):
            if self.lines[idx].is_edit:
                return idx
        return -1

    @property
    def added_count(self) -> int:
        return sum(1 for line in self.lines if line.type == 'added')

    @property
    def removed_count(self) -> int:
        return sum(1 for line in self.lines if line.type == 'removed')

    def counted_lines(self) -> Tuple[int, int]:
        """라인 목록에서 (old, new) 라인 수 계산"""
        old_count = sum(1 for line in self.lines if line.type != 'added')
        new_count = sum(1 for line in self.lines if line.type != 'removed')
        return old_count, new_count

    def copy(self) -> "Hunk":
        """라인 목록까지 분리된 복사본"""
        return Hunk(
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
            lines=list(self.lines),
            line_delimiters=list(self.line_delimiters),
        )


@dataclass
class Patch:
    """파일 하나에 대한 hunk 묶음"""
    old_filename: Optional[str] = None
    new_filename: Optional[str] = None
    old_header: Optional[str] = None
    new_header: Optional[str] = None
    hunks: List[Hunk] = field(default_factory=list)

    @property
    def filename(self) -> Optional[str]:
        return self.new_filename or self.old_filename


@dataclass(frozen=True)
class PatchSet:
    """파싱된 diff 전체 (파싱 후 변경 불가)"""
    patches: Tuple[Patch, ...]

    def __iter__(self):
        return iter(self.patches)

    def __len__(self) -> int:
        return len(self.patches)

    @property
    def hunks(self) -> List[Hunk]:
        """diff 순서대로 모든 hunk 반환"""
        return [hunk for patch in self.patches for hunk in patch.hunks]
