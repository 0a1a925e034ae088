# sisdiesel/utils/pagination.py
from pydantic import BaseModel

class PageMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_prev: bool
    has_next: bool

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

def meta(total: int, page: int, page_size: int) -> PageMeta:
    # página fora do intervalo cai na última página existente
    total_pages = max((total + page_size - 1)//page_size, 1)
    page = max(min(page, total_pages), 1)
    return PageMeta(
        page=page, page_size=page_size, total=total, total_pages=total_pages,
        has_prev=page > 1, has_next=page < total_pages
    )
