"""
FastAPI 应用入口

    uvicorn main:app --reload          # 在 src/backend 下运行
"""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# 仓库根目录的 .env 优先，其次是当前目录
_env_file = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_env_file if _env_file.exists() else None)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from pinyin_review.api import levels, mistakes, pinyin, review  # noqa: E402
from pinyin_review.api.review import get_settings  # noqa: E402

logger = logging.getLogger(__name__)

LOCAL_ORIGIN_REGEX = r"http://(localhost|127\.0\.0\.1)(:\d+)?"


def _cors_options() -> dict:
    """
    跨域配置

    - ALLOWED_ORIGINS=a,b：只允许这些源
    - DEV_MODE=true：允许本机任意端口（前端本地调试）
    - 两者都没有：不允许跨域
    """
    origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    if origins:
        return {"allow_origins": origins}
    if os.getenv("DEV_MODE", "false").lower() == "true":
        return {"allow_origins": [], "allow_origin_regex": LOCAL_ORIGIN_REGEX}

    logger.warning("ALLOWED_ORIGINS 未设置且 DEV_MODE 关闭，拒绝所有跨域请求")
    return {"allow_origins": []}


app = FastAPI(
    title="Pinyin Review API",
    description="拼音错题复习：艾宾浩斯错题本、拼音卡片与 AI 扩充练习",
    version="0.1.0",
)

cors = _cors_options()
logger.info(f"CORS 配置: {cors}")
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    **cors,
)

for module in (mistakes, pinyin, review, levels):
    app.include_router(module.router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "Pinyin Review API", "docs": "/docs"}


@app.get("/health")
async def health():
    """健康检查，ai_available 表示是否配置了 AI 扩充"""
    return {"status": "healthy", "ai_available": get_settings().ai_enabled}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
