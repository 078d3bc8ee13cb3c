from pydantic import BaseModel, Field


class Principal(BaseModel):
    """Authenticated host user as seen by the settings layer."""

    id: str
    display_name: str = ""
    capabilities: list[str] = Field(default_factory=list)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities
