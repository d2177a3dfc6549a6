"""
时钟模块

账本只通过时钟读取当前时间（秒），用于判断纪元窗口是否结束。
"""

import time
from nftfight.core.config import settings


class SystemClock:
    """系统时钟"""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """可手动推进的时钟，相当于开发链上的 evm_increaseTime"""

    def __init__(self, start: int = 0):
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """把时钟向前推进指定秒数，返回推进后的时间"""
        if seconds < 0:
            raise ValueError("时钟只能向前推进")
        self._now += int(seconds)
        return self._now


# 全局时钟实例
_clock = None

def get_clock():
    """获取全局时钟实例"""
    global _clock
    if _clock is None:
        if settings.CLOCK_MODE == "manual":
            _clock = ManualClock(settings.MANUAL_CLOCK_START)
        else:
            _clock = SystemClock()
    return _clock
