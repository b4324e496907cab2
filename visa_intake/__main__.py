#!/usr/bin/env python3
"""비자 인테이크 패키지 메인 엔트리포인트

python -m visa_intake 명령으로 실행 가능한 CLI 인터페이스를 제공합니다.
"""

import sys
import json
import asyncio
import argparse
import subprocess
from pathlib import Path


def run_tests():
    """테스트 실행"""
    print("🧪 비자 인테이크 테스트 실행")

    current_dir = Path(__file__).parent
    project_root = current_dir.parent

    result = subprocess.run([
        sys.executable, "-m", "pytest",
        "visa_intake/tests/",
        "-v", "--tb=short"
    ], cwd=project_root)
    return result.returncode


def run_server():
    """서버 실행"""
    print("🚀 비자 인테이크 서버 시작")

    current_dir = Path(__file__).parent
    project_root = current_dir.parent
    main_script = project_root / "main.py"

    try:
        result = subprocess.run([sys.executable, str(main_script)], cwd=project_root)
        return result.returncode
    except OSError as e:
        print(f"서버 실행 실패: {e}")
        return 1


async def _stream_message(message: str, base_url: str) -> int:
    from visa_intake.streaming import StreamConsumer

    async with StreamConsumer(base_url) as consumer:
        session = await consumer.stream(message)

    print(f"📝 트랜스크립트: {session.transcript}")
    print(f"📦 최종 결과: {json.dumps(session.final_result, ensure_ascii=False, indent=2)}")
    if session.error:
        print(f"❌ 스트림 오류: {session.error}")
        return 1
    return 0


def run_stream(message: str, base_url: str = None):
    """실행 중인 서버에 메시지를 스트리밍으로 전송"""
    if not message:
        print("메시지를 입력해주세요.")
        return 1

    if base_url is None:
        from visa_intake.config import get_settings
        try:
            base_url = get_settings().api_base_url
        except ValueError:
            base_url = "http://localhost:3000"

    print(f"📡 {base_url} 로 스트리밍 요청")
    return asyncio.run(_stream_message(message, base_url))


def show_help():
    """도움말 표시"""
    help_text = """
🛂 비자 인테이크 CLI

사용법:
  python -m visa_intake [command]

명령어:
  test               모든 테스트 실행
  server             비자 인테이크 서버 시작
  stream <message>   실행 중인 서버에 메시지를 스트리밍으로 전송
  help               이 도움말 표시

예시:
  python -m visa_intake test
  python -m visa_intake server
  python -m visa_intake stream "I am Jane Doe, born 1991-04-12, passport AB1234567, nationality UK."
  python -m visa_intake stream "..." --url http://localhost:3000
"""
    print(help_text)


def main():
    """메인 함수"""
    parser = argparse.ArgumentParser(
        description="비자 인테이크 CLI",
        add_help=False  # 커스텀 help 사용
    )
    parser.add_argument(
        "command",
        nargs="?",
        choices=["test", "server", "stream", "help"],
        default="help",
        help="실행할 명령어"
    )
    parser.add_argument("message", nargs="?", default="", help="stream 명령에 보낼 메시지")
    parser.add_argument("--url", default=None, help="서버 주소")

    args = parser.parse_args()

    if args.command == "test":
        return run_tests()
    elif args.command == "server":
        return run_server()
    elif args.command == "stream":
        return run_stream(args.message, args.url)
    else:
        show_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
