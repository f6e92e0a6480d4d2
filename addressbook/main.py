# addressbook/main.py
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from starlette.staticfiles import StaticFiles

# local imports
from addressbook import models  # noqa: F401  registers tables on Base.metadata
from addressbook.config import Settings, settings as default_settings
from addressbook.database import Base, make_engine, make_session_factory
from addressbook.logging_config import configure_logging
from addressbook.migrations import run_migrations
from addressbook.routes_contacts import router as contacts_router
from addressbook.views import not_found_handler, router as pages_router

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings

    # --- Storage: one engine per process, handed to routes via get_db --------
    engine = make_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    Base.metadata.create_all(engine)
    run_migrations(engine)
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    log.info("database ready at %s", engine.url.render_as_string(hide_password=True))

    # --- Sessions (carry one-shot toasts across redirects) -------------------
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY,
        session_cookie=settings.SESSION_COOKIE_NAME,
        same_site="lax",
        https_only=settings.SESSION_HTTPS_ONLY or settings.ENV == "production",
    )

    # --- Templates ------------------------------------------------------------
    templates = Jinja2Templates(directory=settings.TEMPLATES_DIR)
    templates.env.globals["now"] = lambda: datetime.now(timezone.utc)
    templates.env.globals["app_name"] = settings.APP_NAME
    app.state.templates = templates

    # --- Static files (if you use /static) -----------------------------------
    if os.path.isdir(settings.STATIC_DIR):
        app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")

    # --- Routes ---------------------------------------------------------------
    app.include_router(pages_router)
    app.include_router(contacts_router)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)

    return app


# Uvicorn entrypoint expects "app"
app = create_app()
