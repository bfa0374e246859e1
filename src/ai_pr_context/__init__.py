"""
AI PR Context

Pull Request diff에 구문 스코프 컨텍스트를 붙여 주는 리뷰 컨텍스트 엔진
"""

__version__ = "1.0.0"
__author__ = "Hwahae Team"
__email__ = "dev@hwahae.co.kr"

from .api import ContextAPI, ContextResult

__all__ = ["ContextAPI", "ContextResult"]
