"""Infrastructure adapters: cache tiers, serializers, notification channels and configuration."""
