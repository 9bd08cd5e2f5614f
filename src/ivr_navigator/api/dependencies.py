"""Dependências injetadas nas rotas."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Request

from ivr_navigator.config.settings import Settings
from ivr_navigator.domain.protocols.call_endpoint import CallEndpointProtocol
from ivr_navigator.infra.http import HttpClient

CallEndpointFactory = Callable[[Settings, HttpClient], CallEndpointProtocol]


def get_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_http_client(request: Request) -> HttpClient:
    return request.app.state.http_client


def get_call_endpoint_factory(request: Request) -> CallEndpointFactory:
    """Retorna a factory do cliente IVR (substituível em testes)."""

    return request.app.state.call_endpoint_factory
