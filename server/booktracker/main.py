import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from booktracker.config import configure_logging, settings
from booktracker.database import AsyncSessionLocal, init_db
from booktracker.errors import BookTrackerError
from booktracker.schemas.book import STATUS_CHOICES
from booktracker.routers import books
from booktracker.stores import SQLAlchemyBookStore
from booktracker.utils.seed import seed_sample_books

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期：启动时执行迁移，空库时写入示例数据"""
    configure_logging(settings.LOG_LEVEL)
    await init_db()
    if settings.SEED_SAMPLE_DATA:
        async with AsyncSessionLocal() as db:
            await seed_sample_books(SQLAlchemyBookStore(db))
            await db.commit()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="读书记录 API - 跟踪书籍与阅读状态",
    lifespan=lifespan,
)


def _describe_validation_error(exc: RequestValidationError) -> str:
    """把 pydantic 的第一条错误转成面向客户端的简短描述"""
    errors = exc.errors()
    if not errors:
        return "invalid request"
    err = errors[0]
    loc = tuple(err.get("loc", ()))
    err_type = err.get("type", "")

    if loc and loc[0] == "path":
        return "invalid ID format"
    if err_type == "json_invalid" or loc in ((), ("body",)):
        return "Invalid JSON format"

    field = str(loc[-1])
    if err_type in ("missing", "string_too_short"):
        return f"{field} is required"
    if field == "status":
        return f"status must be one of: {STATUS_CHOICES}"
    return f"{field}: {err.get('msg', 'invalid value')}"


# 统一异常处理：错误体一律为 {"error": "..."}
@app.exception_handler(BookTrackerError)
async def book_tracker_error_handler(request: Request, exc: BookTrackerError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"未处理的异常: {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "internal server error"})


# 注册路由
app.include_router(books.router)


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def home():
    return (
        "Book Tracker API\n\n"
        "Available Endpoints:\n"
        "  GET    /books       - List all books\n"
        "  POST   /books       - Add new book\n"
        "  GET    /books/{id}  - Get specific book\n"
        "  PUT    /books/{id}  - Update book\n"
        "  DELETE /books/{id}  - Delete book\n"
    )


@app.get("/health", tags=["系统"])
async def health_check():
    """健康检查接口"""
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }


def run():
    """命令行入口：按配置端口启动 uvicorn"""
    uvicorn.run(
        "booktracker.main:app",
        host="0.0.0.0",
        port=settings.port_number,
        log_level=settings.LOG_LEVEL,
    )


if __name__ == "__main__":
    run()
