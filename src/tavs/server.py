"TAVS Hook Server - 通过 HTTP 接收宿主事件并驱动终端视觉信号"

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from tavs import config
from tavs.config import SignalConfig
from tavs.hooks import HookReceiver, SessionRegistry
from tavs.hooks.registry import SinkFactory
from tavs.telemetry import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    signal_config: SignalConfig | None = None,
    sink_factory: SinkFactory | None = None,
) -> FastAPI:
    """构造 FastAPI 应用

    Args:
        signal_config: 配置（None 时从环境变量加载）
        sink_factory: 每会话 sink 工厂（None 时自动查找 trigger 脚本）

    Returns:
        FastAPI 应用，app.state.registry 为会话注册表
    """
    registry = SessionRegistry(config=signal_config, sink_factory=sink_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("[Server] Started")
        try:
            yield
        finally:
            # 保证终端不停留在 processing/complete 颜色
            await registry.close_all()
            logger.info("[Server] Stopped")

    app = FastAPI(title="TAVS", lifespan=lifespan)
    app.state.registry = registry
    HookReceiver(registry).setup_routes(app)
    return app


def main():
    """入口函数"""
    signal_config = SignalConfig.from_env()
    setup_logging(config.LOG_LEVEL, debug=signal_config.debug)

    app = create_app(signal_config)
    print(f"TAVS hook server starting at http://{config.SERVER_HOST}:{config.SERVER_PORT}")
    try:
        uvicorn.run(app, host=config.SERVER_HOST, port=config.SERVER_PORT, log_level="info")
    except KeyboardInterrupt:
        print("\nServer stopped")


if __name__ == "__main__":
    main()
