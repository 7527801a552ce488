"""Provider used by the default slot until the application binds one."""

from ..domain.contracts import ProviderMetadata


class NoopProvider:
    """Resolves nothing and emits no events."""

    metadata = ProviderMetadata(name="No-op Provider")

    def __repr__(self) -> str:
        return "NoopProvider()"


NOOP_PROVIDER = NoopProvider()
