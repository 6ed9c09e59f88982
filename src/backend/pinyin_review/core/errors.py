"""
复习引擎异常定义
"""
from typing import Optional


class ReviewEngineError(Exception):
    """复习引擎异常基类"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class PersistenceError(ReviewEngineError):
    """写入学习记录失败（数据库 I/O、约束冲突等）"""
    pass


class ReviewSessionError(ReviewEngineError):
    """复习会话使用方式错误（重复提交、队列已结束等）"""
    pass
