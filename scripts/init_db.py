#!/usr/bin/env python3
"""
初始化数据库：建表，写入拼音符号表和起步题库

可重复执行，已有数据不会重复写入。
用法: python scripts/init_db.py
"""
import os
import sys
from pathlib import Path

BACKEND_DIR = (Path(__file__).parent / ".." / "src" / "backend").resolve()
sys.path.insert(0, str(BACKEND_DIR))

# 默认的 SQLite 路径相对于 src/backend
os.chdir(BACKEND_DIR)
Path("data").mkdir(exist_ok=True)

from pinyin_review.core.database import SessionLocal  # noqa: E402
from pinyin_review.models import init_db  # noqa: E402
from pinyin_review.services.seed_service import seed_all  # noqa: E402


def main():
    init_db()
    db = SessionLocal()
    try:
        result = seed_all(db)
    finally:
        db.close()
    print(f"数据库已就绪：拼音符号 {result['symbols']} 个，新增题目 {result['questions_added']} 道")


if __name__ == "__main__":
    main()
