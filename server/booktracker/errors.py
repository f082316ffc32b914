"""统一业务异常 - 由 main.py 中的异常处理器转换为 {"error": ...} 响应"""


class BookTrackerError(Exception):
    status_code: int = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(BookTrackerError):
    """字段缺失、枚举值非法、ID 无法解析"""
    status_code = 400


class NotFoundError(BookTrackerError):
    status_code = 404


class InternalError(BookTrackerError):
    """存储层 / 驱动层失败"""
    status_code = 500


class MigrationError(BookTrackerError):
    status_code = 500
