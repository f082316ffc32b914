from fastapi import APIRouter, Depends, Path, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from booktracker.errors import ValidationError
from booktracker.schemas.book import STATUS_CHOICES, Book, BookRequest, BookStatus
from booktracker.services.book_service import (
    create_book,
    delete_book,
    get_book,
    list_books,
    update_book,
)
from booktracker.stores import BookStore
from booktracker.stores.sqlite import SQLITE_MAX_INT, SQLITE_MIN_INT
from booktracker.utils.deps import get_book_store

router = APIRouter(prefix="/books", tags=["书籍"])


def _book_id_path():
    return Path(..., ge=SQLITE_MIN_INT, le=SQLITE_MAX_INT, description="书籍 ID")


def _parse_status(value: str | None) -> BookStatus | None:
    if not value:
        return None
    try:
        return BookStatus(value)
    except ValueError:
        raise ValidationError(f"status must be one of: {STATUS_CHOICES}") from None


def _parse_body(raw: bytes) -> BookRequest:
    """手动校验请求体，错误交给统一的请求校验处理器"""
    try:
        return BookRequest.model_validate_json(raw)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from None


@router.get("", response_model=list[Book], summary="获取书籍列表")
@router.get("/", response_model=list[Book], include_in_schema=False)
async def list_all(
    status: str | None = Query(None, description="按阅读状态过滤"),
    category: str | None = Query(None, description="按分类过滤"),
    sort_by: str | None = Query(None, description="title / author / date，缺省按 id 降序"),
    store: BookStore = Depends(get_book_store),
):
    """获取书籍列表，可选过滤与排序"""
    return await list_books(
        store, status=_parse_status(status), category=category, sort_by=sort_by
    )


@router.post("", response_model=Book, status_code=201, summary="新增书籍")
@router.post("/", response_model=Book, status_code=201, include_in_schema=False)
async def create(body: BookRequest, store: BookStore = Depends(get_book_store)):
    """新增书籍：start_date 由服务端设置，状态缺省为 to_read"""
    return await create_book(store, body)


@router.get("/{book_id}", response_model=Book, summary="获取书籍详情")
async def get_one(
    book_id: int = _book_id_path(), store: BookStore = Depends(get_book_store)
):
    return await get_book(store, book_id)


@router.put("/{book_id}", response_model=Book, summary="全量更新书籍")
async def update(
    request: Request,
    book_id: int = _book_id_path(),
    store: BookStore = Depends(get_book_store),
):
    """
    全量替换；start_date 不可修改，end_date 按状态自动维护。
    先确认书籍存在再校验请求体：不存在的 ID 一律 404。
    """
    await get_book(store, book_id)
    body = _parse_body(await request.body())
    return await update_book(store, book_id, body)


@router.delete("/{book_id}", status_code=204, summary="删除书籍")
async def delete(
    book_id: int = _book_id_path(), store: BookStore = Depends(get_book_store)
):
    await delete_book(store, book_id)
    return Response(status_code=204)
