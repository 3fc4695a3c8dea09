"""
Core layer: 업로드 이미지 처리와 ID.

역할:
- 업로드 검증, base64 인코딩, 미리보기 data URL
- analysis_id 발급
"""

from .ids import generate_analysis_id
from .images import (
    encode_image,
    from_data_url,
    normalize_mime_type,
    resolve_mime_type,
    to_data_url,
    validate_image,
)

__all__ = [
    # ids
    "generate_analysis_id",
    # images
    "encode_image",
    "from_data_url",
    "normalize_mime_type",
    "resolve_mime_type",
    "to_data_url",
    "validate_image",
]
