"""Tests for event kinds, statuses and event details."""

import pytest

from flagwire import EventDetails, ProviderEvent, ProviderStatus


class TestProviderEvent:
    """Tests for ProviderEvent parsing."""

    def test_wire_values(self):
        """Should use PROVIDER_-prefixed wire values."""
        assert ProviderEvent.READY.value == "PROVIDER_READY"
        assert ProviderEvent.ERROR.value == "PROVIDER_ERROR"
        assert ProviderEvent.STALE.value == "PROVIDER_STALE"
        assert ProviderEvent.CONFIGURATION_CHANGED.value == "PROVIDER_CONFIGURATION_CHANGED"

    def test_parse_member_returns_itself(self):
        """Should return a member unchanged."""
        assert ProviderEvent.parse(ProviderEvent.STALE) is ProviderEvent.STALE

    def test_parse_wire_value(self):
        """Should parse a wire value."""
        assert ProviderEvent.parse("PROVIDER_ERROR") is ProviderEvent.ERROR

    def test_parse_name_is_case_insensitive(self):
        """Should parse member names in any case."""
        assert ProviderEvent.parse("ready") is ProviderEvent.READY
        assert ProviderEvent.parse("Configuration_Changed") is ProviderEvent.CONFIGURATION_CHANGED

    def test_parse_unknown_kind_raises(self):
        """Should raise ValueError for an unknown kind."""
        with pytest.raises(ValueError, match="Unknown provider event: 'PROVIDER_GONE'"):
            ProviderEvent.parse("PROVIDER_GONE")

    def test_kinds_compare_equal_to_wire_values(self):
        """Should compare equal to the wire value string."""
        assert ProviderEvent.READY == "PROVIDER_READY"

    def test_status_values(self):
        """Should define NOT_READY, READY and ERROR."""
        assert [status.value for status in ProviderStatus] == ["NOT_READY", "READY", "ERROR"]


class TestEventDetails:
    """Tests for the immutable event payload."""

    def test_attributes(self):
        """Should expose client name, message and extras."""
        details = EventDetails(client_name="checkout", message="cache expired", age_s=30)

        assert details.client_name == "checkout"
        assert details.message == "cache expired"
        assert details.extra == {"age_s": 30}

    def test_mapping_access(self):
        """Should behave as a read-only mapping."""
        details = EventDetails(client_name="checkout", message="down", code=503)

        assert details["client_name"] == "checkout"
        assert details["message"] == "down"
        assert details["code"] == 503
        assert dict(details) == {"client_name": "checkout", "message": "down", "code": 503}

    def test_client_name_is_always_present(self):
        """Should always carry a client_name key."""
        details = EventDetails()

        assert "client_name" in details
        assert details["client_name"] is None

    def test_absent_message_is_not_a_key(self):
        """Should omit the message key when there is no message."""
        details = EventDetails(client_name="checkout")

        assert "message" not in details
        with pytest.raises(KeyError):
            details["message"]
        assert details.get("message") is None

    def test_extras_are_read_only(self):
        """Should not allow extras to be modified."""
        details = EventDetails(flag="beta")

        with pytest.raises(TypeError):
            details.extra["flag"] = "alpha"

    def test_extras_are_copied(self):
        """Should copy extras on construction."""
        fields = {"flag": "beta"}
        details = EventDetails(**fields)
        fields["flag"] = "alpha"

        assert details["flag"] == "beta"

    def test_equality_with_mappings(self):
        """Should compare equal to mappings with the same items."""
        details = EventDetails(client_name="x", message="m")

        assert details == {"client_name": "x", "message": "m"}
        assert details == EventDetails(client_name="x", message="m")
        assert details != EventDetails(client_name="y", message="m")

    def test_hashable(self):
        """Should hash equal details alike."""
        assert len({EventDetails(client_name="x"), EventDetails(client_name="x")}) == 1

    def test_to_dict(self):
        """Should convert to a plain dict."""
        details = EventDetails(client_name="x", message="m", flags=["a"])

        assert details.to_dict() == {"client_name": "x", "message": "m", "flags": ["a"]}

    def test_repr(self):
        """Should show its items in repr."""
        assert repr(EventDetails(client_name="x")) == "EventDetails({'client_name': 'x'})"


class TestEventDetailsMerge:
    """Tests for stamping provider payloads with a slot's client name."""

    def test_merge_keeps_provider_fields(self):
        """Should keep provider fields when stamping the client name."""
        details = EventDetails.merge({"message": "cache expired", "flags_changed": ["a"]}, "x")

        assert details.client_name == "x"
        assert details.message == "cache expired"
        assert details["flags_changed"] == ["a"]

    def test_merge_overrides_provider_client_name(self):
        """Should replace a provider-supplied client name."""
        details = EventDetails.merge({"client_name": "spoofed"}, "x")

        assert details.client_name == "x"

    def test_merge_into_default_slot(self):
        """Should stamp None for the default slot."""
        details = EventDetails.merge({"client_name": "spoofed"}, None)

        assert details.client_name is None

    def test_merge_without_payload(self):
        """Should build details from the client name alone."""
        details = EventDetails.merge(None, "x")

        assert details == {"client_name": "x"}

    def test_merge_accepts_event_details(self):
        """Should accept EventDetails as the payload."""
        original = EventDetails(client_name="a", message="m", extra_field=1)

        details = EventDetails.merge(original, "b")

        assert details == {"client_name": "b", "message": "m", "extra_field": 1}
