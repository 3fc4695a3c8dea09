"""
ID 생성: analysis_id

분석 1회의 로그 라인을 묶는 용도. 저장하지 않음.
"""

import uuid
from datetime import UTC, datetime

from src.domain.constants import ANALYSIS_ID_PREFIX


def generate_analysis_id() -> str:
    """
    Analysis ID 생성.

    고유성 보장: UUID v4
    포맷: ANL-{timestamp}-{uuid[:8]}

    Returns:
        analysis_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    return f"{ANALYSIS_ID_PREFIX}{timestamp}-{unique}"
