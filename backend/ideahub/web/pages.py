"""
Server-rendered pages. Data is loaded client-side from the JSON API.

    GET /                  → redirect to /ideas
    GET /auth/login        → sign-in form
    GET /auth/signup       → sign-up form
    GET /ideas             → topic list with search and "new topic" form
    GET /ideas/{topic_id}  → ideas of one topic, rating and feedback
"""

import uuid
from pathlib import Path
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.api.deps import get_optional_user
from ideahub.config import get_settings
from ideahub.database import get_db
from ideahub.models.user import User
from ideahub.services.idea_topics import IdeaTopicsService

WEB_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(WEB_DIR / "templates"))

router = APIRouter(include_in_schema=False)


def _context(user: User | None, **extra) -> dict:
    settings = get_settings()
    return {
        "app_name": settings.APP_NAME,
        "current_user": user,
        "debounce_ms": settings.SEARCH_DEBOUNCE_MS,
        **extra,
    }


def _to_login(request: Request) -> RedirectResponse:
    # Token is valid but names no active user; clear it or the gate
    # redirects /auth/login straight back here.
    response = RedirectResponse(
        f"/auth/login?{urlencode({'redirectTo': request.url.path})}", status_code=303
    )
    response.delete_cookie(get_settings().AUTH_COOKIE_NAME)
    return response


@router.get("/")
async def index():
    return RedirectResponse("/ideas", status_code=303)


@router.get("/auth/login")
async def login_page(request: Request, redirectTo: str = "/ideas"):
    # Only same-site paths are accepted as redirect targets
    if not redirectTo.startswith("/") or redirectTo.startswith("//"):
        redirectTo = "/ideas"
    return templates.TemplateResponse(
        request, "login.html", _context(None, redirect_to=redirectTo)
    )


@router.get("/auth/signup")
async def signup_page(request: Request):
    return templates.TemplateResponse(request, "signup.html", _context(None))


@router.get("/ideas")
async def topics_page(
    request: Request,
    current_user: User | None = Depends(get_optional_user),
):
    if current_user is None:
        return _to_login(request)
    return templates.TemplateResponse(request, "topics.html", _context(current_user))


@router.get("/ideas/{topic_id}")
async def topic_page(
    request: Request,
    topic_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    if current_user is None:
        return _to_login(request)

    topic = await IdeaTopicsService.find_by_id(db, current_user.id, topic_id)
    if topic is None:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            _context(current_user, message="Idea topic not found"),
            status_code=404,
        )
    return templates.TemplateResponse(
        request, "topic.html", _context(current_user, topic=topic)
    )
