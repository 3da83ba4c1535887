# src/api/app.py

"""HTTP API for the storefront catalog."""

import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import Any, Literal

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config.settings import Settings
from src.filters.product_filter import CatalogQuery, ProductFilter
from src.normalize.normalizer import normalize_all
from src.services.catalog_service import CatalogService
from src.services.chat_policy import ChatPolicy, keyword_chat_policy
from src.services.health_checker import HealthChecker
from src.storage.catalog_cache import now_ms
from src.storage.recommendation_store import RecommendationStore

logger = logging.getLogger("storefront.api")

_ENV_KEYS = (
    "CATALOG_CSV_URL",
    "CATALOG_JSON_URL",
    "CATALOG_CDN_URL",
    "CATALOG_RAW_URL",
)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(
    status_code: int,
    error: str,
    details: str,
    **extra: Any,
) -> JSONResponse:
    return JSONResponse(
        {"error": error, "details": details, **extra},
        status_code=status_code,
    )


async def _validation_error_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Report malformed parameters as 400 with readable details."""
    problems: list[str] = []
    if isinstance(exc, RequestValidationError):
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            problems.append(f"{location}: {err.get('msg', 'invalid')}")
    logger.info(
        "Rejected %s %s: %s", request.method, request.url.path, problems
    )
    return _error(
        400,
        "Invalid request parameters",
        "; ".join(problems) or str(exc),
        timestamp=_timestamp(),
    )


async def _read_json_object(
    request: Request,
) -> dict[str, Any] | JSONResponse:
    """Decode a JSON object body, or build the 400 response for it."""
    try:
        body = await request.json()
    except ValueError as exc:
        logger.warning("Invalid JSON body on %s: %s", request.url.path, exc)
        return _error(
            400,
            "Invalid JSON in request body",
            "Request body must be valid JSON",
            timestamp=_timestamp(),
        )
    if not isinstance(body, dict):
        return _error(
            400,
            "Invalid request body",
            "Request body must be a JSON object",
            timestamp=_timestamp(),
        )
    return body


def create_app(
    service: CatalogService | None = None,
    chat_policy: ChatPolicy = keyword_chat_policy,
) -> FastAPI:
    """Build the application around one catalog service instance."""
    app = FastAPI(title="Storefront Catalog API", version="1.0")
    app.state.catalog = service or CatalogService()
    app.state.recommendations = RecommendationStore()
    app.state.chat_policy = chat_policy

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(
        RequestValidationError, _validation_error_handler
    )

    @app.get("/api/products")
    async def list_products(
        request: Request,
        category: str = Query("all"),
        min_price: float | None = Query(None, alias="minPrice"),
        max_price: float | None = Query(None, alias="maxPrice"),
        search: str = Query(""),
        page: int = Query(1, ge=1),
        limit: int = Query(Settings.DEFAULT_PAGE_SIZE, gt=0),
        sort_by: Literal["name", "popularity", "price", "feedback"] = Query(
            "popularity", alias="sortBy"
        ),
        sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    ) -> Any:
        """List catalog products with filtering, sorting and pagination.

        Facets (categories, price range) describe the whole catalog,
        not just the filtered subset.  Source failures never surface
        here as errors; they appear in ``debugInfo.lastErrorDetails``.
        """
        catalog: CatalogService = request.app.state.catalog
        query = CatalogQuery(
            category=category,
            min_price=min_price,
            max_price=max_price,
            search=search,
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        logger.info("Catalog request: %s", query)

        try:
            entry = await catalog.snapshot_async()
            result = ProductFilter.apply(list(entry.products), query)
        except Exception as exc:
            logger.error("Catalog request failed: %s", exc, exc_info=True)
            stale = catalog.cache.peek()
            return _error(
                500,
                "Failed to fetch products",
                str(exc),
                dataSource=stale.source_label if stale else None,
            )

        return {
            "products": [p.to_dict() for p in result.products],
            "pagination": {
                "currentPage": result.current_page,
                "totalPages": result.total_pages,
                "totalProducts": result.total_products,
                "hasNextPage": result.has_next_page,
                "hasPrevPage": result.has_prev_page,
            },
            "filters": {
                "categories": result.categories,
                "priceRange": {
                    "min": result.price_min,
                    "max": result.price_max,
                },
            },
            "dataSource": entry.source_label,
            "debugInfo": {
                "fetchedAt": _timestamp(),
                "cacheAge": now_ms() - entry.fetched_at_ms,
                "lastErrorDetails": entry.last_error_detail,
                "truncated": entry.truncated,
            },
        }

    @app.get("/api/debug")
    async def debug_sources(request: Request) -> Any:
        """Check every configured source and report the cache state."""
        catalog: CatalogService = request.app.state.catalog
        checker = HealthChecker(catalog.resolver.sources)
        results = await checker.check_all()
        entry = catalog.cache.peek()
        resolver = catalog.resolver
        current = resolver.current_source

        return {
            "timestamp": _timestamp(),
            "environment": {
                key: "Available" if os.getenv(key) else "Missing"
                for key in _ENV_KEYS
            },
            "sources": [r.to_dict() for r in results],
            "resolver": {
                "state": resolver.state.name,
                "currentSource": current.label if current else None,
                "lastAttempts": (
                    [a.to_dict() for a in entry.attempts] if entry else []
                ),
            },
            "cache": {
                "populated": entry is not None,
                "ageMs": catalog.cache.age_ms(entry) if entry else None,
                "dataSource": entry.source_label if entry else None,
                "lastErrorDetails": (
                    entry.last_error_detail if entry else None
                ),
            },
        }

    @app.post("/api/recommendations")
    async def store_recommendations(request: Request) -> Any:
        """Replace the stored recommendation batch."""
        body = await _read_json_object(request)
        if isinstance(body, JSONResponse):
            return body

        items = body.get("recommendations")
        if not isinstance(items, list) or not all(
            isinstance(item, dict) for item in items
        ):
            return _error(
                400,
                "Invalid recommendations format",
                "Request body must contain a 'recommendations' array "
                "of objects",
                timestamp=_timestamp(),
            )

        session_id = body.get("sessionId")
        store: RecommendationStore = request.app.state.recommendations
        if body.get("metadata"):
            logger.info("Recommendation metadata: %s", body["metadata"])
        stored = store.replace(items, session_id)

        return {
            "success": True,
            "message": "Recommendations received and stored successfully",
            "count": len(items),
            "timestamp": _timestamp(),
            "sessionId": session_id,
            "storedRecommendations": stored,
        }

    @app.get("/api/recommendations")
    async def get_recommendations(request: Request) -> Any:
        """Return the most recently stored recommendation batch."""
        store: RecommendationStore = request.app.state.recommendations
        items = store.items()
        return {
            "recommendations": items,
            "count": len(items),
            "timestamp": _timestamp(),
            "message": (
                "Retrieved stored recommendations"
                if items
                else "No recommendations currently stored"
            ),
        }

    @app.post("/api/chat_recommend")
    async def chat_recommend(request: Request) -> Any:
        """Answer a shopping question with matching products."""
        body = await _read_json_object(request)
        if isinstance(body, JSONResponse):
            return body

        message = body.get("message")
        session_id = body.get("session_id")
        if not isinstance(message, str) or not message.strip() or not session_id:
            return _error(
                400,
                "Message and session_id are required",
                "Both 'message' and 'session_id' must be provided",
            )

        try:
            raw = body.get("available_products")
            if isinstance(raw, list) and raw:
                products = normalize_all(
                    [p for p in raw if isinstance(p, dict)],
                    data_source="request",
                )
            else:
                catalog: CatalogService = request.app.state.catalog
                products = list((await catalog.snapshot_async()).products)

            policy: ChatPolicy = request.app.state.chat_policy
            reply = await asyncio.to_thread(policy, message, products)
        except Exception as exc:
            logger.error("Chat recommendation failed: %s", exc, exc_info=True)
            return _error(500, "Failed to process chat message", str(exc))

        return {
            "response": reply.response,
            "recommendations": reply.recommendations,
            "session_id": session_id,
        }

    return app
