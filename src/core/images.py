"""
이미지 처리: 업로드 검증, base64 인코딩, 미리보기 data URL

규칙:
- 빈 업로드 → 네트워크 호출 전에 reject ("Please upload an image first.")
- 허용 MIME: image/png, image/jpeg, image/webp
- base64는 표준 알파벳, data URL prefix 없이 Gemini에 전달
"""

import base64
import binascii
import logging
import os

from src.domain.constants import (
    ALLOWED_IMAGE_MIME_TYPES,
    IMAGE_MAX_SIZE_MB,
    MIME_TYPES,
    MSG_IMAGE_REQUIRED,
)
from src.domain.errors import ErrorCodes, UploadRejectError
from src.domain.schemas import InlineImage

logger = logging.getLogger(__name__)


def normalize_mime_type(file_type: str | None) -> str:
    """
    파일 타입을 MIME 타입으로 정규화.

    Args:
        file_type: MIME 타입, 확장자(".png"/"png") 또는 파일명

    Returns:
        MIME 타입 (알 수 없으면 application/octet-stream)
    """
    if not file_type:
        return "application/octet-stream"

    file_type_lower = file_type.strip().lower()

    # 이미 MIME 타입이면 파라미터만 떼고 반환
    if "/" in file_type_lower:
        return file_type_lower.split(";")[0].strip()

    ext = os.path.splitext(file_type_lower)[1] or file_type_lower
    if not ext.startswith("."):
        ext = f".{ext}"

    return MIME_TYPES.get(ext, "application/octet-stream")


def resolve_mime_type(content_type: str | None, filename: str | None) -> str:
    """
    업로드 MIME 결정.

    브라우저가 보낸 content_type이 이미지가 아니면 (octet-stream 등) 파일명 확장자로 판단.
    """
    mime = normalize_mime_type(content_type)
    if mime.startswith("image/"):
        return mime
    return normalize_mime_type(filename)


def validate_image(
    file_bytes: bytes | None,
    mime_type: str,
    max_size_mb: float = IMAGE_MAX_SIZE_MB,
    allowed_mime_types: tuple[str, ...] = ALLOWED_IMAGE_MIME_TYPES,
) -> None:
    """
    업로드 이미지 검증.

    Raises:
        UploadRejectError: 빈 파일, 지원하지 않는 형식, 용량 초과
    """
    if not file_bytes:
        raise UploadRejectError(ErrorCodes.IMAGE_REQUIRED, MSG_IMAGE_REQUIRED)

    if mime_type not in allowed_mime_types:
        raise UploadRejectError(
            ErrorCodes.UNSUPPORTED_IMAGE_TYPE,
            f"Unsupported image type: {mime_type}. Use PNG, JPG or WEBP.",
            mime_type=mime_type,
        )

    size_mb = len(file_bytes) / (1024 * 1024)
    if size_mb > max_size_mb:
        raise UploadRejectError(
            ErrorCodes.IMAGE_TOO_LARGE,
            f"Image is too large ({size_mb:.1f} MB). Maximum is {max_size_mb} MB.",
            size_bytes=len(file_bytes),
        )


def encode_image(file_bytes: bytes, file_type: str) -> InlineImage:
    """
    이미지 → Gemini inlineData 파트.

    Args:
        file_bytes: 원본 바이트
        file_type: MIME 타입 또는 확장자

    Returns:
        InlineImage (base64 문자열 + MIME)
    """
    mime_type = normalize_mime_type(file_type)
    data = base64.b64encode(file_bytes).decode("ascii")
    logger.debug(f"Encoded image: {len(file_bytes)} bytes, mime={mime_type}")
    return InlineImage(data=data, mime_type=mime_type)


def to_data_url(image: InlineImage) -> str:
    """미리보기용 data URL."""
    return f"data:{image.mime_type};base64,{image.data}"


def from_data_url(data_url: str) -> tuple[bytes, str]:
    """
    data URL → (바이트, MIME).

    같은 이미지로 다시 분석할 때 페이지에 남겨둔 미리보기에서 복원.

    Raises:
        UploadRejectError: data URL 형식이 아니거나 base64가 깨짐
    """
    header, sep, data = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise UploadRejectError(
            ErrorCodes.INVALID_IMAGE_DATA,
            "Image data is not a base64 data URL. Please upload the image again.",
        )

    mime_type = header[len("data:"):-len(";base64")] or "application/octet-stream"

    try:
        file_bytes = base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise UploadRejectError(
            ErrorCodes.INVALID_IMAGE_DATA,
            "Image data is corrupted. Please upload the image again.",
        ) from e

    return file_bytes, normalize_mime_type(mime_type)
