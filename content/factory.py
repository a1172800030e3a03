"""Factory for creating content provider instances."""

from __future__ import annotations

from content.base import ContentProvider, ProviderConfig


class ProviderFactory:
    """Factory for creating content provider instances."""

    AVAILABLE_PROVIDERS = {
        "gemini": "Gemini character list and generated 3D toy images",
        "anthropic": "Claude character list with placeholder images",
        "placeholder": "Offline: fixed characters with placeholder images",
    }

    def create(self, name: str, config: ProviderConfig | None = None) -> ContentProvider:
        """Create a provider instance."""
        match name.lower():
            case "gemini":
                from content.gemini_provider import GeminiProvider
                return GeminiProvider(config)

            case "anthropic" | "claude":
                from content.anthropic_provider import AnthropicProvider
                return AnthropicProvider(config)

            case "placeholder" | "offline":
                from content.placeholder_provider import PlaceholderProvider
                return PlaceholderProvider()

            case _:
                raise ValueError(f"Unknown content provider: {name}")

    def list_providers(self) -> dict[str, str]:
        """List available providers with descriptions."""
        return self.AVAILABLE_PROVIDERS.copy()
