"""
App Routes.

- analyzer: 분석 화면 (HTML) + 분석 API (JSON)
"""

from . import analyzer

__all__ = ["analyzer"]
