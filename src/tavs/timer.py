"""Timer - 延迟任务服务

提供可取消的一次性延迟任务，调度在宿主的 asyncio 事件循环上（非独立线程）。
支持同步/异步回调，异常隔离。

使用示例:
    timer = Timer()

    # 30 秒后进入空闲
    timer.register_delay("idle", 30.0, go_idle)

    # 取消（幂等）
    timer.cancel_delay("idle")

    # 会话结束时取消全部
    timer.stop()
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine

from .config import METRICS_ENABLED
from .telemetry import get_logger, metrics

logger = get_logger(__name__)

DelayCallback = Callable[[], Any | Coroutine[Any, Any, Any]]


@dataclass
class DelayTask:
    """延迟任务"""
    name: str
    delay: float  # 秒
    callback: DelayCallback
    scheduled_at: float = 0.0  # 调度时间（event loop time）
    trigger_at: float = 0.0  # 触发时间
    handle: asyncio.TimerHandle | None = field(default=None, repr=False)
    cancelled: bool = False


class Timer:
    """延迟任务服务

    设计原则:
    1. 同名任务至多一个：重复注册先取消旧 handle
    2. 支持同步/异步回调（异步回调由 create_task 包裹）
    3. 异常隔离：回调失败只记录日志和指标
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        """初始化 Timer

        Args:
            loop: 事件循环，None 时在注册时取当前运行中的 loop
        """
        self._loop = loop
        self._delay_tasks: dict[str, DelayTask] = {}
        self._pending: set[asyncio.Task] = set()
        self._warned_no_loop = False

    def _get_loop(self) -> asyncio.AbstractEventLoop | None:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def register_delay(self, name: str, delay: float, callback: DelayCallback) -> bool:
        """注册延迟任务

        如果已存在同名任务，会被覆盖（取消旧任务）。

        Args:
            name: 任务名（用于日志和取消）
            delay: 延迟时间（秒）
            callback: 回调函数（同步或异步）

        Returns:
            是否成功调度（没有可用事件循环时为 False）
        """
        loop = self._get_loop()
        if loop is None:
            # 同步宿主每轮 COMPLETE 都会走到这里，只告警一次
            message = f"[Timer] No running event loop, delay task '{name}' not scheduled"
            if self._warned_no_loop:
                logger.debug(message)
            else:
                logger.warning(message)
                self._warned_no_loop = True
            return False

        if name in self._delay_tasks:
            logger.debug(f"[Timer] Overwriting delay task: {name}")
            self.cancel_delay(name)

        now = loop.time()
        task = DelayTask(
            name=name,
            delay=delay,
            callback=callback,
            scheduled_at=now,
            trigger_at=now + delay,
        )
        task.handle = loop.call_later(delay, self._fire, task)
        self._delay_tasks[name] = task
        logger.debug(f"[Timer] Registered delay task: {name} ({delay}s)")
        return True

    def cancel_delay(self, name: str) -> bool:
        """取消延迟任务（幂等）

        Args:
            name: 任务名

        Returns:
            是否确实取消了一个待触发任务
        """
        task = self._delay_tasks.pop(name, None)
        if task is None:
            return False
        task.cancelled = True
        if task.handle is not None:
            task.handle.cancel()
        logger.debug(f"[Timer] Cancelled delay task: {name}")
        return True

    def has_delay(self, name: str) -> bool:
        """检查是否存在待触发的延迟任务"""
        return name in self._delay_tasks

    def stop(self) -> None:
        """取消所有未触发的延迟任务"""
        for name in list(self._delay_tasks.keys()):
            self.cancel_delay(name)

    def _fire(self, task: DelayTask) -> None:
        """call_later 回调：先摘除任务，再执行"""
        # 已被覆盖或取消的 handle 不再执行
        if task.cancelled or self._delay_tasks.get(task.name) is not task:
            return
        del self._delay_tasks[task.name]

        try:
            result = task.callback()
        except Exception as e:
            self._record_error(task.name, e)
            return

        if inspect.iscoroutine(result):
            loop = self._get_loop()
            aio_task = loop.create_task(self._await_callback(task.name, result))
            self._pending.add(aio_task)
            aio_task.add_done_callback(self._pending.discard)

    async def _await_callback(self, name: str, coro: Coroutine[Any, Any, Any]) -> None:
        try:
            await coro
        except Exception as e:
            self._record_error(name, e)

    def _record_error(self, name: str, error: Exception) -> None:
        logger.error(f"[Timer] Task '{name}' failed: {error}")
        if METRICS_ENABLED:
            metrics.inc("timer.errors", {"task": name})

    # === 状态查询（用于测试）===

    @property
    def delay_task_count(self) -> int:
        """延迟任务数量"""
        return len(self._delay_tasks)

    def get_delay_tasks(self) -> list[str]:
        """获取所有延迟任务名"""
        return list(self._delay_tasks.keys())
