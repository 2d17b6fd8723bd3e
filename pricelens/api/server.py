# pricelens/api/server.py

"""HTTP routing: one scrape endpoint per platform plus name unification."""

import asyncio
import logging
import time
import traceback
from collections.abc import Awaitable, Callable
from typing import Any

from flask import Flask, Response, current_app, jsonify, request

from pricelens.config.settings import Settings
from pricelens.scrapers.product_scraper import scrape_product
from pricelens.services.name_unifier import (
    NameUnifier,
    UnifierConfigError,
    UnifierError,
)

logger = logging.getLogger("pricelens.api")

ScrapeFn = Callable[[str, str], Awaitable[dict[str, Any]]]

START_TIME = time.time()


def _product_name() -> Any:
    """productName from the JSON body (POST) or the query string."""
    if request.method == "POST":
        body = request.get_json(silent=True) or {}
        if "productName" in body:
            return body.get("productName")
    return request.args.get("productName")


def _make_scrape_view(
    platform_id: str, label: str,
) -> Callable[[], tuple[Response, int]]:
    """Build the view function for ``/api/<platform>-scrape``."""

    def scrape_view() -> tuple[Response, int]:
        product_name = _product_name()
        if not isinstance(product_name, str) or not product_name.strip():
            return jsonify(
                {"success": False, "error": "productName is required"}
            ), 400

        logger.info(
            "Received %s %s request for '%s'",
            request.method,
            platform_id,
            product_name,
        )
        scrape: ScrapeFn = current_app.config["SCRAPE_FN"]
        try:
            result = asyncio.run(scrape(platform_id, product_name.strip()))
        except Exception as e:
            logger.error(
                "Error in /api/%s-scrape: %s", platform_id, e, exc_info=True,
            )
            body: dict[str, Any] = {
                "success": False,
                "platform": label,
                "error": str(e),
            }
            if current_app.config["APP_ENV"] != "production":
                body["details"] = traceback.format_exc()
            return jsonify(body), 500

        return jsonify(result), 200

    scrape_view.__name__ = f"{platform_id}_scrape"
    return scrape_view


def create_app(
    scrape_fn: ScrapeFn | None = None,
    unifier_factory: Callable[[], NameUnifier] | None = None,
) -> Flask:
    """Build the Flask app; collaborators are injectable for tests."""
    app = Flask(__name__)
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.json.ensure_ascii = False  # type: ignore[attr-defined]
    app.config["SCRAPE_FN"] = scrape_fn or scrape_product
    app.config["UNIFIER_FACTORY"] = unifier_factory or NameUnifier
    app.config["APP_ENV"] = Settings.APP_ENV

    for platform in Settings.AVAILABLE_PLATFORMS:
        app.add_url_rule(
            f"/api/{platform['id']}-scrape",
            view_func=_make_scrape_view(platform["id"], platform["label"]),
            methods=["GET", "POST"],
        )

    @app.after_request
    def add_security_headers(response: Response) -> Response:
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        return response

    @app.post("/api/unify-name")
    def unify_name() -> tuple[Response, int]:
        body = request.get_json(silent=True) or {}
        link = body.get("link")
        if not link:
            return jsonify({"error": "Please provide a product link."}), 400

        try:
            unifier = current_app.config["UNIFIER_FACTORY"]()
            name = unifier.unify(link)
        except UnifierConfigError as e:
            logger.error("Unifier not configured: %s", e)
            return jsonify({"error": str(e)}), 500
        except UnifierError as e:
            return jsonify(
                {"error": "Internal server error", "details": str(e)}
            ), 500

        return jsonify({"unifiedProductName": name}), 200

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "uptime_sec": int(time.time() - START_TIME),
        }

    return app
