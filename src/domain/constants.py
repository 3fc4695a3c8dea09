"""
Domain Constants: 분석기 전역 상수.

Gemini 요청 스키마(프롬프트, 응답 스키마), 업로드 정책 등.
프롬프트/스키마 문구를 바꾸면 응답 형태가 바뀌므로 schemas.py와 함께 수정할 것.
"""

# =============================================================================
# Gemini Endpoint
# =============================================================================

DEFAULT_MODEL = "gemini-2.5-flash-preview-09-2025"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT_SECONDS = 60.0

# =============================================================================
# Retry Policy
# =============================================================================
# 429/5xx만 재시도. 총 시도 횟수 3회, 대기 1s → 2s (지수 백오프)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 1.0
DEFAULT_MAX_DELAY = 60.0
RETRYABLE_STATUS_CODES = frozenset({429})
SERVER_ERROR_MIN_STATUS = 500

# =============================================================================
# Upload Policy
# =============================================================================

ALLOWED_IMAGE_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")
IMAGE_MAX_SIZE_MB = 10

# 재분석용 data URL 필드: base64(4/3배) + "data:<mime>;base64," 헤더 여유
BASE64_SIZE_RATIO = 4 / 3
DATA_URL_HEADER_MARGIN = 1024

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".heic": "image/heic",
}

# =============================================================================
# User-facing Messages
# =============================================================================

MSG_IMAGE_REQUIRED = "Please upload an image first."
MSG_INVALID_STRUCTURE = "Invalid response structure from API."
MSG_INVALID_UPLOAD = "Upload could not be read. Please upload the image again."
MSG_FAILURE_TEMPLATE = "Failed to analyze image. {message}. Please try again."

# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT = (
    "You are a waste management expert. Analyze the user's image of a waste item. "
    "First, identify the waste type, home treatment, and industry treatment for the "
    "item in the image. "
    "In *addition* to identifying the item, you must *also* generate a complete set "
    "of *mock dashboard data* (stats, charts) to simulate a full user profile. "
    "The identified item (waste_type, etc.) should be based on the image, but all "
    "other dashboard data should be plausibly fabricated. "
    "Ensure the generated hex colors are distinct and aesthetically pleasing in a "
    "dark mode UI. "
    "Respond *only* with the complete JSON object requested."
)

USER_QUERY = (
    "Analyze this image and provide waste treatment information and mock dashboard data."
)

# =============================================================================
# Response Schema (Gemini OpenAPI subset)
# =============================================================================

REQUIRED_RESPONSE_FIELDS = (
    "waste_type",
    "home_treatment",
    "industry_treatment",
    "stats",
    "waste_composition",
    "disposal_trends",
    "recycling_rates",
)

RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        # --- 1. 이미지 속 품목 분석 ---
        "waste_type": {
            "type": "STRING",
            "description": (
                "The common name of the waste item in the image "
                "(e.g., 'Plastic Water Bottle', 'Apple Core')."
            ),
        },
        "home_treatment": {
            "type": "STRING",
            "description": (
                "Concise instructions for how a person should dispose of this item at home."
            ),
        },
        "industry_treatment": {
            "type": "STRING",
            "description": (
                "A brief explanation of what happens to this item at an "
                "industrial/municipal level."
            ),
        },
        # --- 2. 대시보드 통계 (mock) ---
        "stats": {
            "type": "OBJECT",
            "description": "A set of mock statistics for the user's dashboard.",
            "properties": {
                "recycled_items_count": {
                    "type": "NUMBER",
                    "description": (
                        "A mock count of total items recycled by this user (e.g., 2847)."
                    ),
                },
                "carbon_saved_kg": {
                    "type": "STRING",
                    "description": (
                        "A mock string representing total carbon saved, including "
                        "units (e.g., '284 kg')."
                    ),
                },
                "average_score_percent": {
                    "type": "STRING",
                    "description": (
                        "A mock user 'eco-score' as a percentage string (e.g., '87%')."
                    ),
                },
            },
        },
        # --- 3. 파이 차트 ---
        "waste_composition": {
            "type": "ARRAY",
            "description": (
                "An array of 5 objects representing the user's mock waste "
                "composition for a pie chart."
            ),
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {
                        "type": "STRING",
                        "description": "Category of waste (e.g., 'Plastic').",
                    },
                    "value": {
                        "type": "NUMBER",
                        "description": "Percentage value (e.g., 35).",
                    },
                    "color": {
                        "type": "STRING",
                        "description": "A hex color code for the chart slice (e.g., '#e78a53').",
                    },
                },
            },
        },
        # --- 4. 영역 차트 ---
        "disposal_trends": {
            "type": "ARRAY",
            "description": "An array of 6 objects for the last 6 months' disposal trends.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "month": {
                        "type": "STRING",
                        "description": "Abbreviated month name (e.g., 'Jan').",
                    },
                    "home": {
                        "type": "NUMBER",
                        "description": "Mock 'Home' disposal value for the month.",
                    },
                    "industrial": {
                        "type": "NUMBER",
                        "description": "Mock 'Industrial' disposal value for the month.",
                    },
                },
            },
        },
        # --- 5. 막대 차트 ---
        "recycling_rates": {
            "type": "ARRAY",
            "description": (
                "An array of 5 objects representing mock recycling rates per "
                "category for a bar chart."
            ),
            "items": {
                "type": "OBJECT",
                "properties": {
                    "category": {
                        "type": "STRING",
                        "description": "Waste category (e.g., 'Plastic').",
                    },
                    "rate": {
                        "type": "NUMBER",
                        "description": "Recycling rate percentage (e.g., 68).",
                    },
                },
            },
        },
    },
    "required": list(REQUIRED_RESPONSE_FIELDS),
}

# =============================================================================
# Hash & ID Prefixes
# =============================================================================

ANALYSIS_ID_PREFIX = "ANL-"
