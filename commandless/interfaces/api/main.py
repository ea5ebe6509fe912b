# commandless/interfaces/api/main.py
"""FastAPI application exposing the intent resolution engine.

Provides endpoints to resolve chat messages, manage a tenant's command
templates (manual authoring and discovery) and record bot-authored turns
for reply linking.
"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Load environment variables from .env file
load_dotenv()

from commandless.config import settings  # noqa: E402
from commandless.core.context.store import ConversationContextStore  # noqa: E402
from commandless.core.errors import TemplateStoreError  # noqa: E402
from commandless.core.matching.generation import default_generator  # noqa: E402
from commandless.core.resolution.models import Author, Utterance  # noqa: E402
from commandless.core.resolution.policy import IntentResolutionPolicy  # noqa: E402
from commandless.core.templates.generator import CommandSchema, PatternGenerator  # noqa: E402
from commandless.core.templates.models import CommandTemplate  # noqa: E402
from commandless.core.templates.repository import get_repository  # noqa: E402
from commandless.interfaces.api.schemas import (  # noqa: E402
    DiscoveredTemplateResponse,
    DiscoverRequest,
    ResolveRequest,
    ResolveResponse,
    TemplateCreate,
    TemplateResponse,
    TurnCreate,
)
from commandless.interfaces.api.security import (  # noqa: E402
    get_rate_limit_string,
    get_resolve_rate_limit_string,
    limiter,
    verify_api_key,
)
from commandless.utils.logging import (  # noqa: E402
    configure_structured_logging,
    ensure_request_id,
    get_request_id,
    set_request_id,
)
from commandless.utils.observability import setup_logfire  # noqa: E402

logger = logging.getLogger(__name__)

ApiKey = Annotated[str, Depends(verify_api_key)]

_context_store: ConversationContextStore | None = None
_policy: IntentResolutionPolicy | None = None


def get_context_store() -> ConversationContextStore:
    """Get the process-wide ConversationContextStore."""
    global _context_store
    if _context_store is None:
        _context_store = ConversationContextStore()
    return _context_store


def get_policy() -> IntentResolutionPolicy:
    """Get the process-wide IntentResolutionPolicy.

    The generative matcher is enabled only when a model credential is set.
    """
    global _policy
    if _policy is None:
        _policy = IntentResolutionPolicy(
            store=get_repository(),
            generator=default_generator(),
            context_store=get_context_store(),
        )
    return _policy


def reset_engine() -> None:
    """Drop the policy and context store so the next request rebuilds them (for testing)."""
    global _context_store, _policy
    _context_store = None
    _policy = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    configure_structured_logging()

    if settings.api_key:
        logger.info("Model credential found - generative matcher enabled (%s)", settings.intent_model)
    else:
        logger.warning("GOOGLE_API_KEY not set - using heuristic matcher only")

    get_policy()

    yield

    get_context_store().clear()
    logger.info("Shutting down...")


app = FastAPI(
    title="Commandless Intent API",
    description="Resolve free-form chat messages into bot commands",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

setup_logfire(app)


@app.middleware("http")
async def request_id_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Attach a correlation id to every request and echo it back."""
    request_id = request.headers.get("X-Request-ID") or ""
    set_request_id(request_id)
    if not request_id:
        request_id = ensure_request_id()
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(TemplateStoreError)
async def template_store_error_handler(request: Request, exc: TemplateStoreError) -> JSONResponse:
    logger.error("Template store failure: %s", exc)
    return JSONResponse(status_code=503, content={"detail": "Template store unavailable"})


@app.get("/health")
@limiter.limit(get_rate_limit_string)
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint.

    Returns:
        Dictionary with health status and generative matcher availability.
    """
    return {
        "status": "healthy",
        "model_ready": get_policy().primary is not None,
    }


@app.post("/resolve", response_model=ResolveResponse)
@limiter.limit(get_resolve_rate_limit_string)
async def resolve_message(
    request: Request, resolve_request: ResolveRequest, _api_key: ApiKey
) -> ResolveResponse:
    """Resolve one chat message into Execute, Clarify or Converse.

    Raises:
        HTTPException: 503 when the template store is unavailable.
    """
    policy = get_policy()
    utterance = Utterance(
        content=resolve_request.content,
        author=Author(id=resolve_request.author_id, name=resolve_request.author_name),
        channel_id=resolve_request.channel_id,
        mentions=resolve_request.mentions,
        reply_to_message_id=resolve_request.reply_to_message_id,
        message_id=resolve_request.message_id,
    )

    if resolve_request.confirm:
        templates = await get_repository().list_active_templates(resolve_request.tenant_id)
        decision = await policy.resolve_with_confirmation(utterance, templates)
    else:
        decision = await policy.resolve_for_tenant(resolve_request.tenant_id, utterance)

    return ResolveResponse(request_id=get_request_id(), decision=decision.to_dict())


@app.get("/templates", response_model=list[TemplateResponse])
@limiter.limit(get_rate_limit_string)
async def list_templates(
    request: Request, tenant_id: str, _api_key: ApiKey, include_inactive: bool = False
) -> list[TemplateResponse]:
    """List a tenant's templates (active only unless include_inactive)."""
    repo = get_repository()
    templates = repo.list_all(tenant_id) if include_inactive else repo.list_active(tenant_id)
    return [TemplateResponse.from_template(t) for t in templates]


@app.post("/templates", response_model=TemplateResponse, status_code=201)
@limiter.limit(get_rate_limit_string)
async def create_template(
    request: Request, template_request: TemplateCreate, _api_key: ApiKey
) -> TemplateResponse:
    """Create a manually authored template.

    Raises:
        HTTPException: 400 if the output uses a placeholder that can never be filled.
    """
    template = CommandTemplate(
        id=0,
        tenant_id=template_request.tenant_id,
        name=template_request.name,
        natural_language_pattern=template_request.natural_language_pattern,
        output_template=template_request.output_template,
        description=template_request.description,
        aliases=template_request.aliases,
    )
    try:
        created = get_repository().create(template)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return TemplateResponse.from_template(created)


@app.post(
    "/templates/discover",
    response_model=list[DiscoveredTemplateResponse],
    status_code=201,
)
@limiter.limit(get_rate_limit_string)
async def discover_templates(
    request: Request, discover_request: DiscoverRequest, _api_key: ApiKey
) -> list[DiscoveredTemplateResponse]:
    """Generate and store templates for commands discovered on a platform."""
    generator = PatternGenerator()
    repo = get_repository()
    created = []

    for command in discover_request.commands:
        schema = CommandSchema.from_dict(command.model_dump())
        generated = generator.generate_patterns(schema)
        template = repo.create(generator.build_template(schema, discover_request.tenant_id))
        created.append(
            DiscoveredTemplateResponse(
                **TemplateResponse.from_template(template).model_dump(),
                generation_confidence=generated.confidence,
            )
        )

    logger.info(
        "Discovered %d commands for tenant %s", len(created), discover_request.tenant_id
    )
    return created


@app.post("/templates/{template_id}/deactivate")
@limiter.limit(get_rate_limit_string)
async def deactivate_template(
    request: Request, template_id: int, _api_key: ApiKey
) -> dict[str, str]:
    """Deactivate a template (templates are never deleted)."""
    if not get_repository().deactivate(template_id):
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return {"message": f"Template {template_id} deactivated"}


@app.post("/context/turns", status_code=201)
@limiter.limit(get_rate_limit_string)
async def record_turn(request: Request, turn: TurnCreate, _api_key: ApiKey) -> dict[str, str]:
    """Remember a turn (typically the bot's reply) for reply linking."""
    get_context_store().record(
        channel_id=turn.channel_id,
        message_id=turn.message_id,
        author_id=turn.author_id,
        content=turn.content,
        is_bot_authored=turn.is_bot_authored,
    )
    return {"message": "Turn recorded"}
