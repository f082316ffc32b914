from booktracker.models.book import BookRecord, IsoDateTime

__all__ = [
    "BookRecord",
    "IsoDateTime",
]
