"""
调度器能力接口

错题（固定阶梯）和拼音符号（两档间隔）是两套独立的间隔重复策略，
只在"记录一次结果 / 查询到期项"这一层共享接口，不做统一建模。
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Optional


class Scheduler(ABC):
    """间隔重复调度器抽象基类"""

    @abstractmethod
    def record_outcome(
        self,
        user_id: str,
        item_id: Any,
        success: bool,
        now: Optional[datetime] = None,
        **kwargs
    ) -> Any:
        """
        记录一次复习结果并写回数据库

        Args:
            user_id: 用户ID
            item_id: 学习项ID（题目ID 或 拼音符号ID）
            success: 是否答对/记住
            now: 当前时间，默认取当前 UTC 时间
        """
        pass

    @abstractmethod
    def due_items(self, user_id: str, now: Optional[datetime] = None) -> List[Any]:
        """查询到期需要复习的学习项（空列表表示暂无需复习）"""
        pass
