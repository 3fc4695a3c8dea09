#!/usr/bin/env python
"""
로컬 이미지 분석 스크립트.

실행:
    uv run python scripts/analyze_image.py path/to/bottle.jpg
    uv run python scripts/analyze_image.py path/to/bottle.jpg --model gemini-2.0-flash
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# 프로젝트 루트를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

# .env 파일 로드
from dotenv import load_dotenv

load_dotenv()

from src.app.main import configure_logging, load_config  # noqa: E402
from src.app.services.analysis import AnalysisService  # noqa: E402
from src.domain.errors import AnalyzerError  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Analyze a waste image with Gemini and print the result as JSON.",
    )
    parser.add_argument("image", type=Path, help="Image file (PNG, JPG, WEBP)")
    parser.add_argument("--model", help="Override ai.analyzer.model from default.yaml")
    parser.add_argument("--config", type=Path, help="Config file (default: default.yaml)")
    return parser.parse_args(argv)


async def analyze(args: argparse.Namespace) -> int:
    """이미지 분석 후 JSON 출력. 실패 시 1 반환."""
    config = load_config(args.config)
    configure_logging(config)

    if args.model:
        config.setdefault("ai", {}).setdefault("analyzer", {})["model"] = args.model

    if not args.image.is_file():
        print(f"❌ 파일을 찾을 수 없습니다: {args.image}", file=sys.stderr)
        return 1

    service = AnalysisService(config)

    try:
        image = service.prepare_image(args.image.read_bytes(), args.image.name, None)
        result = await service.run(image)
    except AnalyzerError as e:
        print(f"❌ [{e.code}] {e.message}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    return asyncio.run(analyze(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
