"""
数据库连接

DATABASE_URL 默认指向 src/backend/data 下的 SQLite 文件，生产环境可换成 PostgreSQL。
"""
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/pinyin_review.db")


def create_db_engine(url: str = DATABASE_URL):
    # SQLite 连接会被 FastAPI 线程池中的不同线程使用
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = create_db_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI 依赖：每个请求一个会话，请求结束后关闭"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
