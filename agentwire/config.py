"""Global configuration: loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class AgentWireSettings(BaseSettings):
    app_name: str = "a2a-remote-service"
    host: str = "127.0.0.1"
    port: int = 9876
    public_url: str = ""  # Advertised on the Agent Card; derived from host/port when empty
    log_level: str = "INFO"

    # Which sample agent the server exposes: roll | prime | root | llm
    agent: str = "roll"
    agent_card_path: Path | None = None  # JSON file that replaces the generated card

    # Execution limits
    agent_timeout_seconds: float = 15.0
    max_llm_calls: int = 20

    # Outbound A2A calls (remote sub-agents, CLI client)
    client_timeout_seconds: float = 30.0
    remote_agent_url: str = "http://localhost:9877"  # prime agent used by the root sample

    # LLM-backed sample agent
    anthropic_api_key: str = ""
    default_model: str = "claude-sonnet-4-20250514"

    model_config = {"env_prefix": "AGENTWIRE_"}

    @property
    def base_url(self) -> str:
        return (self.public_url or f"http://{self.host}:{self.port}").rstrip("/")


settings = AgentWireSettings()
