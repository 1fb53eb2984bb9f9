from abc import ABC
from typing import Generic, TypeVar, Any, Dict
from pydantic import BaseModel, Field


ConfigT = TypeVar('ConfigT', bound=BaseModel)


class BaseConfig(BaseModel):
    """Base configuration for all components"""
    pass


class BackendConfig(BaseConfig):
    """Store backend selection: registry key plus client settings"""
    type: str = Field(..., description="Backend type: dict|postgres|redis|elasticsearch")
    config: Dict[str, Any] = Field(default_factory=dict, description="Backend-specific client settings")


class BaseComponent(ABC, Generic[ConfigT]):
    """
    Base component class for store adapters.

    Subclasses receive their validated config and build their client
    handles in ``_setup``. A pre-built client may be injected instead, in
    which case the host owns its lifecycle.
    """

    def __init__(self, config: ConfigT, client: Any = None):
        self.config = config
        self.client = client
        self._setup()

    def _setup(self):
        """Override this for initialization logic"""
        pass

    def is_available(self) -> bool:
        """Check if the backing store answers"""
        return True
