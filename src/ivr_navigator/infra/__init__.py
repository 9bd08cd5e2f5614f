"""Camada de infraestrutura: cliente HTTP assíncrono.

Uso típico:
    from ivr_navigator.infra import create_http_client

Infraestrutura não decide regra de negócio; o domínio não a conhece.
"""

from ivr_navigator.infra.http import HttpClient, HttpClientConfig, HttpError, create_http_client

__all__ = [
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "create_http_client",
]
