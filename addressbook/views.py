from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.exception_handlers import http_exception_handler
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from addressbook.toast import pop_toast

router = APIRouter()


# -------------------------
# small helpers
# -------------------------
def render(request: Request, template_name: str, context: dict, status_code: int = 200):
    """Render a page, attaching any pending toast exactly once."""
    context = {**context, "toast": pop_toast(request)}
    return request.app.state.templates.TemplateResponse(
        request, template_name, context, status_code=status_code
    )


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """HTML pages get the not-found template; other errors keep FastAPI's JSON body."""
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return await http_exception_handler(request, exc)
    detail = exc.detail if isinstance(exc.detail, str) else "Not Found"
    if detail == "Not Found":
        detail = "The requested page could not be found"
    return render(
        request,
        "not_found.html",
        {"title": "Not found", "detail": detail},
        status_code=status.HTTP_404_NOT_FOUND,
    )


# -------------------------
# Home
# -------------------------
@router.get("/")
def home(request: Request):
    return render(request, "home.html", {"title": "Homepage"})
