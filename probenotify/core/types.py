"""Domain types shared across the probe system."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Endpoint(BaseModel):
    """A probe target — display name, optional port and free-form labels."""

    model_config = ConfigDict(frozen=True)

    name: str
    port: int | None = None
    labels: dict[str, str] = Field(default_factory=dict)

    def dst(self) -> str:
        """Destination address: ``name``, or ``name:port`` when a port is set."""
        if self.port is None:
            return self.name
        host = self.name
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return f"{host}:{self.port}"

    @property
    def key(self) -> str:
        """Stable identity used to key per-target state."""
        return self.dst()
