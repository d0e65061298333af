# shellaudit — Shell Script Security Analysis Service
# Copyright (C) 2026 shellaudit Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""HTTP API: script listing, authenticated analysis, rule catalog.

``create_app`` builds an application bound to one config, one script
registry and one rule set. Analysis runs in sync handlers, so FastAPI
dispatches it to its threadpool and concurrent requests never share
mutable state beyond the registry lock.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from shellaudit import __version__
from shellaudit.config import ServiceConfig
from shellaudit.crypto.tokens import extract_bearer, verify_token
from shellaudit.engine import analyze
from shellaudit.errors import AuthError, LoadError, NotFoundError
from shellaudit.policy.rule_registry import RuleRegistry
from shellaudit.store.script_registry import ScriptRegistry

logger = logging.getLogger(__name__)


# ─── Dependencies ────────────────────────────────────────────────────


def get_registry(request: Request) -> ScriptRegistry:
    return request.app.state.registry


def get_rules(request: Request) -> RuleRegistry:
    return request.app.state.rules


def require_auth(
    request: Request,
    authorization: Optional[str] = Header(None, description="Bearer <token>"),
) -> dict[str, Any]:
    """Validate the bearer token against the configured secret."""
    config: ServiceConfig = request.app.state.config
    try:
        token = extract_bearer(authorization)
        return verify_token(token, config.signing_secret)
    except AuthError as e:
        client = request.client.host if request.client else "-"
        logger.warning("Rejected request to %s from %s: %s", request.url.path, client, e)
        raise HTTPException(status_code=401, detail=str(e)) from e


# ─── App factory ─────────────────────────────────────────────────────


def create_app(
    config: ServiceConfig,
    registry: ScriptRegistry,
    rules: RuleRegistry,
) -> FastAPI:
    app = FastAPI(
        title="shellaudit",
        description="Static security analysis of shell scripts.",
        version=__version__,
    )
    app.state.config = config
    app.state.registry = registry
    app.state.rules = rules

    @app.exception_handler(Exception)
    async def universal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health", tags=["health"])
    def health(registry: ScriptRegistry = Depends(get_registry)) -> dict:
        return {"status": "ok", "version": __version__, "scripts": len(registry)}

    @app.get("/scripts", tags=["scripts"])
    def list_scripts(registry: ScriptRegistry = Depends(get_registry)) -> list[str]:
        return registry.list()

    @app.post("/scripts/reload", tags=["scripts"])
    def reload_scripts(
        registry: ScriptRegistry = Depends(get_registry),
        _claims: dict = Depends(require_auth),
    ) -> dict:
        try:
            registry.reload()
        except LoadError as e:
            logger.error("Script reload failed: %s", e)
            raise HTTPException(status_code=500, detail="Script reload failed") from e
        return {"scripts": registry.list()}

    @app.get("/rules", tags=["rules"])
    def list_rules(rules: RuleRegistry = Depends(get_rules)) -> list[dict]:
        return [
            rule.model_dump(mode="json", exclude={"pattern"})
            for rule in rules
        ]

    @app.get("/analyze", tags=["analysis"])
    def analyze_script(
        script: Optional[str] = Query(None, description="Script filename or name"),
        registry: ScriptRegistry = Depends(get_registry),
        rules: RuleRegistry = Depends(get_rules),
        _claims: dict = Depends(require_auth),
    ) -> JSONResponse:
        if not script:
            raise HTTPException(status_code=400, detail="Missing required parameter: script")
        try:
            found = registry.lookup(script)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

        result = analyze(found.content, rules, script_name=found.filename)
        logger.info(
            "Analyzed %s: score=%d findings=%d",
            found.filename, result.overall_score, len(result.findings),
        )
        return JSONResponse(content=result.to_dict())

    return app
