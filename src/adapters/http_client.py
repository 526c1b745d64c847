"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza base URL, timeouts, headers y la access key de Hydrus.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

ACCESS_KEY_HEADER = "Hydrus-Client-API-Access-Key"


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` apuntando a la Client API.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los endpoints se comporten igual.
    - La access key solo se envía si está configurada.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "*/*",
    }
    if settings.access_key:
        headers[ACCESS_KEY_HEADER] = settings.access_key
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.api_url.rstrip("/"),
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
