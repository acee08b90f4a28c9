"""DemoDriver -- Demo 模式下自动推进任务

订阅者以 ?demo=true 连接时启用：首次等待固定延迟后，
每次随机挑选一个未完成任务推进一步，之后的等待从 [min, max] 均匀随机抽取。
推进结果与用户手动推进一样经 TaskService 持久化并广播。
"""

import asyncio
import random

import structlog

log = structlog.get_logger()


class DemoDriver:
    """单个订阅者的 Demo 推进器"""

    def __init__(
        self,
        task_service,
        initial_delay: float = 2.0,
        interval_range: tuple[float, float] = (3.0, 8.0),
        rng: random.Random | None = None,
    ) -> None:
        self._task_service = task_service
        self._initial_delay = initial_delay
        self._interval_range = interval_range
        self._rng = rng or random.Random()

    def next_interval(self) -> float:
        """下一次推进前的等待（秒）"""
        low, high = self._interval_range
        return self._rng.uniform(low, high)

    async def tick(self):
        """推进一个随机未完成任务；没有可推进任务时跳过

        Returns:
            TaskProgress 或 None
        """
        progress = await self._task_service.progress_random_task(self._rng)
        if progress is None:
            log.info("demo_no_tasks_to_progress")
            return None
        log.info(
            "demo_task_progressed",
            task_id=progress.task.id,
            title=progress.task.title,
            from_status=progress.previous_status,
            to_status=progress.new_status,
        )
        return progress

    async def run(self) -> None:
        """循环推进，直到所属订阅关闭时被取消"""
        log.info("demo_mode_started")
        try:
            await asyncio.sleep(self._initial_delay)
            while True:
                try:
                    await self.tick()
                except Exception as e:
                    # 单次推进失败不终止 Demo 循环
                    log.error("demo_tick_failed", error=str(e))
                await asyncio.sleep(self.next_interval())
        finally:
            log.info("demo_mode_stopped")
