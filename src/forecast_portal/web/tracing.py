from typing import Any

import sentry_sdk

from forecast_portal.config import Settings


def skip_health(ctx: Any) -> float:
    if "asgi_scope" in ctx:
        asgi = ctx["asgi_scope"]
        path = asgi.get("path")
        if path is not None:
            if path.startswith("/health"):
                return 0.0
    return 1.0


def setup_tracing(settings: Settings) -> None:
    if settings.sentry_dsn is not None and settings.sentry_environment is not None:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.sentry_environment,
            profiles_sample_rate=1.0,
            traces_sampler=skip_health,
        )
