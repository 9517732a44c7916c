"""
Choice-list provider contracts.

A ChoiceListProvider is the saved configuration of one choice parameter; it
produces the selectable values. Its Descriptor serves the configuration form
(display name, form endpoints) and builds providers from submitted form data.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict


class ChoiceListProvider(BaseModel, ABC):
    """Saved provider configuration. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    default_choice: str | None = None

    @abstractmethod
    def get_choice_list(self) -> list[str]:
        """Current choices, in display order. Never None."""


class ChoiceListProviderDescriptor(ABC):
    """Form-side companion of a provider type, registered in the registry."""

    id: str
    display_name: str

    @abstractmethod
    def new_instance(self, form: Any, **kwargs: Any) -> ChoiceListProvider:
        """Build a provider from submitted form data."""

    @abstractmethod
    def load(self, data: dict[str, Any]) -> ChoiceListProvider:
        """Rebuild a provider from its persisted form."""
