"""
Pytest 配置和通用 Fixtures

提供内存 SQLite 数据库、假 LLM 客户端和常用测试数据
"""
import os
import sys
from datetime import datetime
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# 测试中不连接真实的 Langfuse / LLM
os.environ.setdefault("LANGFUSE_ENABLED", "false")

from pinyin_review.llm import ChatResponse, LLMClient, LLMError  # noqa: E402
from pinyin_review.models import Question, PinyinSymbol, init_db  # noqa: E402


# ==================== 数据库 ====================

@pytest.fixture
def engine():
    """每个测试独立的内存数据库"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """数据库会话"""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ==================== Mock LLM ====================

class MockLLMClient(LLMClient):
    """
    Mock LLM 客户端，返回预设内容或抛出预设异常
    用于测试 AI 扩充，不发起网络请求
    """

    def __init__(self, content: str = "[]", error: Optional[Exception] = None,
                 delay: float = 0.0, available: bool = True):
        self.content = content
        self.error = error
        self.delay = delay
        self.available = available
        self.calls: List[List[Dict[str, str]]] = []

    async def chat(self, messages, *, temperature=0.7, max_tokens=None):
        import asyncio

        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ChatResponse(content=self.content, model="mock-model")

    @property
    def model_name(self) -> str:
        return "mock-model"

    @property
    def is_available(self) -> bool:
        return self.available


@pytest.fixture
def mock_llm():
    """创建返回两道有效题目的 Mock LLM"""
    return MockLLMClient(
        content='[{"content": "天空", "pinyin": "tian1 kong1"}, '
                '{"content": "大地", "pinyin": "da4 di4"}]'
    )


@pytest.fixture
def failing_llm():
    """创建总是失败的 Mock LLM"""
    return MockLLMClient(error=LLMError("connection refused"))


# ==================== 测试数据 ====================

@pytest.fixture
def now():
    """固定的当前时间（naive UTC）"""
    return datetime(2024, 3, 1, 8, 0, 0)


def make_question(db, question_id: str, content: str, pinyin: str,
                  question_type: str = "character", is_deleted: bool = False) -> Question:
    """写入一道题目"""
    question = Question(
        id=question_id,
        level_id=1,
        question_type=question_type,
        content=content,
        pinyin=pinyin,
        is_deleted=is_deleted,
    )
    db.add(question)
    db.commit()
    return question


@pytest.fixture
def sample_questions(db):
    """测试用题目：两个单字、一个词语、一个句子"""
    return [
        make_question(db, "q-tian", "天", "tiān"),
        make_question(db, "q-di", "地", "dì"),
        make_question(db, "q-nihao", "你好", "nǐ hǎo", question_type="word"),
        make_question(db, "q-sentence", "我爱北京天安门", "wǒ ài běi jīng tiān ān mén",
                      question_type="sentence"),
    ]


@pytest.fixture
def sample_symbols(db):
    """测试用拼音符号"""
    symbols = [
        PinyinSymbol(id="b", category="initial", group_name="声母", pinyin="b",
                     mnemonic="听广播 b b b", emoji="👄", example_word="爸爸",
                     example_pinyin="bà ba", sort_order=0),
        PinyinSymbol(id="p", category="initial", group_name="声母", pinyin="p",
                     mnemonic="泼泼水 p p p", emoji="💦", example_word="爬山",
                     example_pinyin="pá shān", sort_order=1),
        PinyinSymbol(id="a", category="final", group_name="韵母", pinyin="a",
                     mnemonic="张大嘴巴 a a a", emoji="😮", example_word="阿姨",
                     example_pinyin="ā yí", sort_order=2),
    ]
    db.add_all(symbols)
    db.commit()
    return symbols
