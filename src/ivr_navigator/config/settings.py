"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou arquivo .env em dev).
Tempos do protocolo multi-dígito são parâmetros do colaborador, não invariantes.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# Rotas padrão do webhook de voz (formato TwiML)
# -----------------------------------------------------------------------------
IVR_VOICE_PATH: str = "/twilio/v1/voice"
IVR_STATUS_PATH: str = "/twilio/v1/voice/status"

VALID_TRAVERSAL_MODES = frozenset({"scripted", "exploratory", "assisted"})


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    # Aplicação
    service_name: str = "ivr_navigator"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Endpoint IVR (webhook de voz)
    ivr_base_url: str = "http://localhost:8080"
    ivr_voice_path: str = IVR_VOICE_PATH
    ivr_status_path: str = IVR_STATUS_PATH
    ivr_from_number: str = "7249143802"  # From enviado em toda perna
    ivr_to_number: str = "9193736940"  # To enviado em toda perna
    ivr_request_timeout_seconds: float = 30.0
    ivr_connect_retries: int = 2  # Só falhas de conexão (request nunca entregue)
    ivr_retry_backoff_seconds: float = 1.0

    # Protocolo multi-dígito
    inter_leg_delay_seconds: float = 1.0  # Entre perna 1 (1º dígito) e perna 2
    blank_recovery_delay_seconds: float = 1.0  # Antes da perna "continue" de recuperação
    step_delay_seconds: float = 2.0  # Espera após cada passo do driver

    # Travessia
    traversal_mode: str = "scripted"  # scripted | exploratory | assisted
    max_steps: int = 20
    call_id_prefix: str = "IvrNav"
    flow_rx_number: str = "0001234"  # Receita usada pelos fluxos nomeados (refill/status)

    # Advisor externo (modo assisted)
    advisor_enabled: bool = False
    advisor_base_url: str = "http://localhost:8081"
    advisor_profile: str = "IVR_tester"
    advisor_request_timeout_seconds: float = 60.0

    # Relatórios
    report_output_dir: str = "./ivr_results"

    @property
    def ivr_voice_url(self) -> str:
        """URL completa do webhook de voz."""
        return f"{self.ivr_base_url.rstrip('/')}{self.ivr_voice_path}"

    @property
    def ivr_status_url(self) -> str:
        """URL completa do webhook de status (encerramento)."""
        return f"{self.ivr_base_url.rstrip('/')}{self.ivr_status_path}"

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    def validate_traversal_config(self) -> list[str]:
        """Valida modo de travessia, orçamento de passos e tempos.

        Retorna lista de erros (vazia = OK).
        """
        errors: list[str] = []
        mode = self.traversal_mode.lower()
        if mode not in VALID_TRAVERSAL_MODES:
            errors.append(
                f"TRAVERSAL_MODE '{mode}' inválido. Valores válidos: {sorted(VALID_TRAVERSAL_MODES)}"
            )
        if self.max_steps < 1:
            errors.append("MAX_STEPS deve ser >= 1")
        delays = {
            "INTER_LEG_DELAY_SECONDS": self.inter_leg_delay_seconds,
            "BLANK_RECOVERY_DELAY_SECONDS": self.blank_recovery_delay_seconds,
            "STEP_DELAY_SECONDS": self.step_delay_seconds,
        }
        for name, value in delays.items():
            if value < 0:
                errors.append(f"{name} não pode ser negativo")
        if not self.flow_rx_number.isdigit():
            errors.append("FLOW_RX_NUMBER deve conter apenas dígitos")
        return errors

    def validate_advisor_config(self) -> list[str]:
        """Valida configuração do advisor externo.

        Modo assisted sem advisor habilitado é erro de configuração.
        """
        errors: list[str] = []
        if self.traversal_mode.lower() == "assisted" and not self.advisor_enabled:
            errors.append("TRAVERSAL_MODE=assisted requer ADVISOR_ENABLED=true")
        if self.advisor_enabled and not self.advisor_base_url:
            errors.append("ADVISOR_ENABLED=true requer ADVISOR_BASE_URL configurado")
        return errors

    def validate_endpoint_config(self) -> list[str]:
        """Valida URL e números do endpoint IVR."""
        errors: list[str] = []
        if not self.ivr_base_url.startswith(("http://", "https://")):
            errors.append("IVR_BASE_URL deve começar com http:// ou https://")
        elif self.is_production and self.ivr_base_url.startswith("http://"):
            errors.append("IVR_BASE_URL deve usar https em production")
        if not self.ivr_from_number or not self.ivr_to_number:
            errors.append("IVR_FROM_NUMBER e IVR_TO_NUMBER são obrigatórios")
        if self.ivr_connect_retries < 0:
            errors.append("IVR_CONNECT_RETRIES não pode ser negativo")
        return errors


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()
