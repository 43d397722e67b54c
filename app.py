from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from config import settings
from detail_page import DEFAULT_TAB, AuthContext, PgDetailController
from errors import ListingLookupError
from lookup import lookup_listing
from providers.api_client import NO_CACHE_HEADERS, HttpListingSource
from providers.mock import FixtureListingSource
from providers.mongo_store import MongoListingStore

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
SESSION_COOKIE = "session"


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    store.close()


app = FastAPI(title="PG Finder", version="0.3.0", lifespan=lifespan)

# Set CORS_ORIGINS (comma separated) when the frontend lives on another domain.
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

store = MongoListingStore(settings.mongodb_uri, settings.mongodb_db, settings.mongodb_collection)
# Static fallback data is a development aid only; chosen once at startup.
fallback_source: Optional[FixtureListingSource] = FixtureListingSource() if settings.is_development else None


def get_store() -> MongoListingStore:
    return store


def get_listing_source() -> Iterator[HttpListingSource]:
    source = HttpListingSource(settings.pg_api_base_url, timeout=settings.fetch_timeout)
    try:
        yield source
    finally:
        source.close()


def get_fallback_source() -> Optional[FixtureListingSource]:
    return fallback_source


def get_auth(request: Request) -> AuthContext:
    # Stand-in for the real auth provider: any session cookie counts as logged in.
    return AuthContext(is_authenticated=bool(request.cookies.get(SESSION_COOKIE)))


@app.exception_handler(ListingLookupError)
async def listing_lookup_error_handler(request: Request, exc: ListingLookupError):
    if exc.status_code >= 500:
        logger.error("Error fetching PG listing: %s", exc, exc_info=exc)
    else:
        logger.info("%s: %s", exc.status_code, exc.public_message)
    return JSONResponse({"error": exc.public_message}, status_code=exc.status_code, headers=NO_CACHE_HEADERS)


@app.get("/api/pg/{pg_id}")
def api_pg_detail(pg_id: str, listing_store: MongoListingStore = Depends(get_store)):
    return JSONResponse(lookup_listing(listing_store, pg_id), headers=NO_CACHE_HEADERS)


PAGE_ACTIONS: Dict[str, str] = {
    "save": "toggle_save",
    "book": "handle_book_now",
    "contact": "handle_contact_owner",
}


def _load_page(pg_id: str, source, auth: AuthContext, fallback, toasts: List[Dict[str, str]]) -> PgDetailController:
    controller = PgDetailController(
        pg_id,
        source,
        auth=auth,
        notify=lambda message, kind: toasts.append({"message": message, "kind": kind}),
        fallback=fallback,
    )
    controller.load()
    return controller


def _render_page(request: Request, controller: PgDetailController, tab: str, toasts: List[Dict[str, str]]):
    ctx = controller.context(tab)
    ctx["toasts"] = toasts
    return templates.TemplateResponse(request, "pg_detail.html", ctx)


@app.get("/explore/{pg_id}", response_class=HTMLResponse)
def explore_detail(
    request: Request,
    pg_id: str,
    tab: str = DEFAULT_TAB,
    image: int = 0,
    source: HttpListingSource = Depends(get_listing_source),
    auth: AuthContext = Depends(get_auth),
    fallback: Optional[FixtureListingSource] = Depends(get_fallback_source),
):
    toasts: List[Dict[str, str]] = []
    controller = _load_page(pg_id, source, auth, fallback, toasts)
    if controller.view() == "detail":
        try:
            controller.select_image(image)
        except IndexError:
            # out-of-range thumbnails just show the first image
            logger.debug("Ignoring image index %s for PG %s", image, pg_id)
    return _render_page(request, controller, tab, toasts)


@app.post("/explore/{pg_id}/{action}", response_class=HTMLResponse)
def explore_action(
    request: Request,
    pg_id: str,
    action: str,
    saved: bool = False,
    tab: str = DEFAULT_TAB,
    source: HttpListingSource = Depends(get_listing_source),
    auth: AuthContext = Depends(get_auth),
    fallback: Optional[FixtureListingSource] = Depends(get_fallback_source),
):
    if action not in PAGE_ACTIONS:
        raise HTTPException(status_code=404, detail=f"Unknown action: {action}")
    toasts: List[Dict[str, str]] = []
    controller = _load_page(pg_id, source, auth, fallback, toasts)
    controller.saved = saved
    getattr(controller, PAGE_ACTIONS[action])()
    return _render_page(request, controller, tab, toasts)


@app.get("/health")
def health():
    return {"ok": True, "version": app.version}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
