"""Explicit registry of provider implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

from .models import ConfigError
from .provider import FEATURES, HostingdeProvider, ProviderFeatures, new_provider

ProviderFactory = Callable[[Mapping[str, str]], HostingdeProvider]


@dataclass(frozen=True)
class RegisteredProvider:
    """A factory and the feature notes of a provider type."""

    name: str
    factory: ProviderFactory
    features: ProviderFeatures


class ProviderRegistry:
    """Maps provider type names to factories; built by the application."""

    def __init__(self) -> None:
        self._entries: dict[str, RegisteredProvider] = {}

    def register(self, name: str, factory: ProviderFactory, features: ProviderFeatures | None = None) -> None:
        """Register a provider type; names are case-insensitive and unique."""
        key = name.upper()
        if key in self._entries:
            raise ConfigError(f"Provider type {key} is already registered.")
        self._entries[key] = RegisteredProvider(key, factory, features or ProviderFeatures())

    def names(self) -> list[str]:
        return sorted(self._entries)

    def _get(self, name: str) -> RegisteredProvider:
        try:
            return self._entries[name.upper()]
        except KeyError as exc:
            raise ConfigError(f"Unknown provider type {name!r}; known: {', '.join(self.names()) or 'none'}.") from exc

    def features(self, name: str) -> ProviderFeatures:
        return self._get(name).features

    def create(self, name: str, settings: Mapping[str, str]) -> HostingdeProvider:
        """Instantiate a provider of the given type."""
        return self._get(name).factory(settings)


def default_registry() -> ProviderRegistry:
    """Return a registry holding the built-in providers."""
    registry = ProviderRegistry()
    registry.register("HOSTINGDE", new_provider, FEATURES)
    return registry
