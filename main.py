#!/usr/bin/env python3
"""비자 인테이크 서버 메인 실행 스크립트

FastAPI 서버를 시작하여 비자 인테이크 추출/스트리밍 서비스를 제공합니다.
"""

import asyncio
import logging
import uvicorn
from dotenv import load_dotenv
from visa_intake.config import get_settings
from visa_intake.services import create_app
from visa_intake.streaming import RelayManager

# .env 파일 로드 (애플리케이션 시작 시)
# .env 파일이 프로젝트 루트에 있어야 합니다.
load_dotenv()

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

settings = get_settings()

# FastAPI 앱 인스턴스 생성 (uvicorn이 찾을 수 있도록 모듈 레벨에서 정의)
app = create_app(
    relay_manager=RelayManager(max_sessions=settings.max_relay_sessions),
    questions_config=settings.questions_config
)


def main():
    """메인 함수: FastAPI 서버 시작"""
    try:
        logger.info(f"비자 인테이크 서버 시작 - {settings.host}:{settings.port}")

        # Uvicorn 서버 설정
        config = uvicorn.Config(
            app=app,
            host=settings.host,
            port=settings.port,
            log_level="info",
            access_log=True
        )

        # 서버 실행
        server = uvicorn.Server(config)
        asyncio.run(server.serve())

    except KeyboardInterrupt:
        logger.info("서버 종료 (Ctrl+C)")
    except Exception as e:
        logger.error(f"서버 실행 오류: {e}")
        raise


if __name__ == "__main__":
    main()
