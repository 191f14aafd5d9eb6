"""Rate-limited demo endpoint speaking the probe's text contract.

Each GET is answered with a single line, either
``Allowed : <client> count: <n><br>`` or
``Disallowed : <client> count: <n><br>``. The client key is the ``ip``
query parameter when present, so one machine can pose as many clients.
That override makes the limiter trivial to bypass and exists for testing
only.
"""

from __future__ import annotations

from aiohttp import web

from throttleprobe._internal.logging import get_logger
from throttleprobe.demo.limiter import FixedWindowLimiter

logger = get_logger("demo.server")

LIMITER_KEY = web.AppKey("limiter", FixedWindowLimiter)
DISALLOW_STATUS_KEY = web.AppKey("disallow_status", int)


async def _throttle_handler(request: web.Request) -> web.Response:
    limiter = request.app[LIMITER_KEY]
    client = request.query.get("ip") or request.remote or "unknown"
    decision = limiter.check(client)

    if decision.allowed:
        body = f"Allowed : {client} count: {decision.count}<br>\n"
        status = 200
    else:
        body = f"Disallowed : {client} count: {decision.count}<br>\n"
        status = request.app[DISALLOW_STATUS_KEY]
        logger.debug("Throttled %s at count %d", client, decision.count)

    return web.Response(
        text=body,
        status=status,
        content_type="text/html",
        charset="utf-8",
        headers={"Cache-Control": "no-store"},
    )


def create_app(
    limiter: FixedWindowLimiter | None = None,
    *,
    disallow_status: int = 200,
) -> web.Application:
    """Build the demo application.

    Args:
        limiter: Limiter deciding each request. Defaults to 5 requests
            per 60 seconds per client.
        disallow_status: HTTP status for throttled requests. The default
            of 200 leaves the body marker as the only signal.

    Returns:
        The aiohttp application serving ``GET /`` and ``GET /throttle``.
    """
    app = web.Application()
    app[LIMITER_KEY] = limiter if limiter is not None else FixedWindowLimiter()
    app[DISALLOW_STATUS_KEY] = disallow_status
    app.router.add_get("/", _throttle_handler)
    app.router.add_get("/throttle", _throttle_handler)
    return app


def serve(
    host: str = "127.0.0.1",
    port: int = 8080,
    *,
    rate: int = 5,
    window: float = 60.0,
    disallow_status: int = 200,
) -> None:
    """Run the demo target until interrupted.

    Args:
        host: Interface to bind.
        port: TCP port to bind.
        rate: Requests allowed per window per client.
        window: Window length in seconds.
        disallow_status: HTTP status for throttled requests.
    """
    app = create_app(
        FixedWindowLimiter(rate=rate, window=window),
        disallow_status=disallow_status,
    )
    logger.info(
        "Serving demo target on http://%s:%d/throttle (rate=%d per %.0fs)",
        host,
        port,
        rate,
        window,
    )
    web.run_app(app, host=host, port=port, print=None)
