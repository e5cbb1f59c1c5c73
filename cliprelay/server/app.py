"""
HTTP surface: home page, username cookie and the catch-all relay route
"""
import logging
from pathlib import Path
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from cliprelay import __version__
from cliprelay.config import Settings
from cliprelay.errors import DurationExceeded, InvalidDomain, PipelineError
from cliprelay.models.request_context import RequestContext
from cliprelay.use_cases.relay_video import RelayVideoUseCase
from cliprelay.utils.utils import parse_request_path

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
USERNAME_COOKIE = "username"
USERNAME_MAX_AGE = 7 * 24 * 60 * 60  # 7 days


def _raw_request_path(request: Request) -> str:
    """
    Path plus query string as the client sent it

    raw_path keeps percent-escapes intact; the embedded URL is passed on verbatim.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


def create_app(settings: Settings, use_case: Optional[RelayVideoUseCase] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Process settings
        use_case: Pipeline to run; wired from settings when omitted

    Returns:
        FastAPI app
    """
    app = FastAPI(title="cliprelay", version=__version__)
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    relay = use_case or RelayVideoUseCase.from_settings(settings)

    app.state.settings = settings
    app.state.relay = relay

    def render_error(request: Request, message: str, source: Optional[str] = None) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "error.html",
            {"error_message": message, "error_source": source},
        )

    @app.on_event("startup")
    async def on_startup():
        logger.info(f"Server running on port: {settings.port}")
        if not settings.channels:
            logger.warning("No delivery channels configured (set CHANNELS or DISCORD_WEBHOOK)")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/set-username")
    async def set_username(username: str = Form("")):
        response = RedirectResponse("/", status_code=303)
        username = username.strip()
        if username:
            response.set_cookie(USERNAME_COOKIE, username, max_age=USERNAME_MAX_AGE)
        else:
            response.delete_cookie(USERNAME_COOKIE)
        return response

    @app.get("/{full_path:path}", response_class=HTMLResponse)
    async def relay_video(request: Request, background_tasks: BackgroundTasks, full_path: str = ""):
        """
        Expected format:
            http://localhost:3000/https://www.youtube.com/watch?v=tCDvOQI3pco/?message=hello%20there&channel=general
        """
        parsed = parse_request_path(_raw_request_path(request))
        username = request.cookies.get(USERNAME_COOKIE) or None
        client = request.client.host if request.client else None

        if not parsed.source_url:
            logger.info(f"[{client}] Root path accessed")
            return templates.TemplateResponse(
                request,
                "index.html",
                {"server": settings.server_name, "username": username or ""},
            )

        ctx = RequestContext(
            source_url=parsed.source_url,
            message=parsed.message,
            username=username,
            channel=parsed.channel or settings.default_channel,
            client_address=client,
        )

        try:
            title = await relay.admit(ctx)
        except InvalidDomain as e:
            return render_error(request, e.user_message, source=e.url)
        except DurationExceeded as e:
            return render_error(request, e.user_message)
        except PipelineError as e:
            return render_error(request, e.user_message)

        background_tasks.add_task(relay.execute, ctx, title)
        return templates.TemplateResponse(request, "success.html", {"video_title": title})

    return app
