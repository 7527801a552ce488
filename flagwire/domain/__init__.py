"""Domain layer: events, contracts, exceptions and the provider registry."""
