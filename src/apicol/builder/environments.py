"""Turn normalized servers into collection environments."""

from __future__ import annotations

from typing import Iterable, Optional

from apicol.models import Environment, ImportSettings, ServerEntry, Variable


def build_environments(
    servers: Iterable[ServerEntry],
    settings: Optional[ImportSettings] = None,
) -> tuple[Environment, ...]:
    """Create one environment per server, in declaration order.

    Each environment is named after the server's description, falling back
    to ``env1``, ``env2``... by position, and holds exactly one enabled,
    non-secret variable (``BaseUrl`` by default) whose value is the server
    URL without trailing slashes. Servers sharing a URL are not merged.
    """
    settings = settings or ImportSettings()
    return tuple(
        Environment(
            name=server.name or f"{settings.env_name_prefix}{index}",
            variables=(
                Variable(
                    enabled=True,
                    key=settings.base_url_variable,
                    value=server.url_template.rstrip("/"),
                    secret=False,
                ),
            ),
        )
        for index, server in enumerate(servers, start=1)
    )
