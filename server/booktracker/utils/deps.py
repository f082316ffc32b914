from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from booktracker.database import get_db
from booktracker.stores import BookStore, SQLAlchemyBookStore


async def get_book_store(db: AsyncSession = Depends(get_db)) -> BookStore:
    """请求级存储：与本次请求的 session 共用同一事务"""
    return SQLAlchemyBookStore(db)
