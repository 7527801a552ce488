"""Tests for provider capability discovery."""

from flagwire import EventEmitter, NOOP_PROVIDER, ProviderMetadata
from flagwire.domain.contracts import provider_name, ProviderCapabilities


class TestProviderCapabilities:
    """Tests for ProviderCapabilities.of."""

    def test_noop_provider_has_no_capabilities(self):
        """Should find no optional capabilities on the no-op provider."""
        assert ProviderCapabilities.of(NOOP_PROVIDER) == ProviderCapabilities()

    def test_resolves_callables_and_event_source(self, make_provider):
        """Should resolve bound callables and the event source."""
        provider = make_provider()

        capabilities = ProviderCapabilities.of(provider)

        assert capabilities.initialize is provider.initialize
        assert capabilities.on_close is provider.on_close
        assert capabilities.on_context_change is None
        assert capabilities.events is provider.events

    def test_non_callable_members_are_ignored(self):
        """Should ignore members that are not callable or not event sources."""
        class Odd:
            metadata = ProviderMetadata(name="odd")
            initialize = "not callable"
            events = object()

        capabilities = ProviderCapabilities.of(Odd())

        assert capabilities.initialize is None
        assert capabilities.events is None

    def test_custom_event_source(self):
        """Should accept any object with add_handler and remove_handler."""
        class Source:
            def add_handler(self, kind, handler):
                pass

            def remove_handler(self, kind, handler):
                pass

        class WithSource:
            metadata = ProviderMetadata(name="sourced")
            events = Source()

        assert ProviderCapabilities.of(WithSource()).events is WithSource.events

    def test_emitter_is_an_event_source(self):
        """Should accept an EventEmitter as event source."""
        class WithEmitter:
            events = EventEmitter()

        assert ProviderCapabilities.of(WithEmitter()).events is WithEmitter.events


class TestProviderName:
    """Tests for provider display names."""

    def test_uses_metadata_name(self, make_provider):
        """Should use the metadata name."""
        assert provider_name(make_provider("env")) == "env"

    def test_falls_back_to_class_name(self):
        """Should fall back to the class name without metadata."""
        class Anonymous:
            pass

        assert provider_name(Anonymous()) == "Anonymous"
