"""
App layer: UI 서버 (FastAPI + Jinja2).

역할:
- 이미지 업로드, 분석 화면 렌더링
- Gemini 호출 (providers), 페이지 상태 조립 (services)

주의: 폴더 구분
- src/app/templates/ → Jinja2 HTML
- src/app/static/ → CSS
"""
