"""Tests for bridge sessions against the fake bridge."""

import json

import httpx
import pytest
from huebridge.bridge import AuthenticatedBridge, Bridge
from huebridge.errors import BridgeError, DecodeError, DiscoveryError, TransportError, ValidationError
from huebridge.models import CommandLight

from mock_bridge import BRIDGE_ADDRESS, USERNAME, FakeBridge


@pytest.fixture
def fake():
    return FakeBridge()


@pytest.fixture
def bridge(fake):
    return Bridge(BRIDGE_ADDRESS, transport=fake.transport())


@pytest.fixture
def authed(bridge):
    return bridge.with_user(USERNAME)


def test_with_user_is_pure(fake, bridge):
    """Test that attaching a username makes no request and keeps the original bridge."""
    authed = bridge.with_user(USERNAME)
    assert isinstance(authed, AuthenticatedBridge)
    assert authed.address == BRIDGE_ADDRESS
    assert authed.username == USERNAME
    assert not isinstance(bridge, AuthenticatedBridge)
    assert fake.requests == []


def test_unauthenticated_bridge_has_no_light_operations(bridge):
    """Test that light operations only exist once a username is attached."""
    assert not hasattr(bridge, "get_all_lights")
    assert not hasattr(bridge, "set_light_state")


def test_empty_username_rejected():
    """Test that an authenticated bridge needs a username."""
    with pytest.raises(ValidationError):
        AuthenticatedBridge(BRIDGE_ADDRESS, "")


def test_repr_hides_username(authed):
    """Test that the username does not leak through repr."""
    assert USERNAME not in repr(authed)


@pytest.mark.parametrize("username", ["a" * 10, "a" * 40])
def test_register_user_length_boundaries_accepted(fake, bridge, username):
    """Test that usernames of 10 and 40 characters are sent."""
    registration = bridge.register_user("huebridge#tests", username)
    assert registration.username == username
    request = fake.last_request
    assert request.method == "POST"
    assert str(request.url) == f"http://{BRIDGE_ADDRESS}/api"
    assert json.loads(request.content) == {"devicetype": "huebridge#tests", "username": username}


@pytest.mark.parametrize("username", ["a" * 9, "a" * 41, ""])
def test_register_user_length_rejected_before_network(fake, bridge, username):
    """Test that invalid usernames never reach the network."""
    with pytest.raises(ValidationError):
        bridge.register_user("huebridge#tests", username)
    assert fake.requests == []


def test_register_user_link_button_not_pressed():
    """Test that the bridge's refusal surfaces as a BridgeError."""
    fake = FakeBridge(link_button_pressed=False)
    bridge = Bridge(BRIDGE_ADDRESS, transport=fake.transport())
    with pytest.raises(BridgeError) as excinfo:
        bridge.register_user("huebridge#tests", "abc1234567")
    assert excinfo.value.code == 101
    assert excinfo.value.description == "link button not pressed"


def test_register_user_works_when_authenticated(authed):
    """Test that registration is available in both states."""
    assert authed.register_user("huebridge#tests", "abc1234567").username == "abc1234567"


def test_get_all_lights(fake, authed):
    """Test listing lights in id order."""
    lights = authed.get_all_lights()
    assert [light.id for light in lights] == [1, 2, 10]
    assert lights[0].light.name == "Living Room"
    assert lights[0].light.state.bri == 128
    assert lights[1].light.state.on is False
    assert fake.last_request.method == "GET"
    assert str(fake.last_request.url) == f"http://{BRIDGE_ADDRESS}/api/{USERNAME}/lights"


def test_get_all_lights_refetches_every_call(fake, authed):
    """Test that nothing is cached between calls."""
    authed.get_all_lights()
    authed.get_all_lights()
    assert len(fake.requests) == 2


def test_get_all_lights_unauthorized_user(fake, bridge):
    """Test that an unknown username yields a decode error, not an empty list."""
    with pytest.raises(DecodeError):
        bridge.with_user("not-a-user").get_all_lights()


def test_set_light_state_sends_only_present_fields(fake, authed):
    """Test the PUT body and the typed result."""
    result = authed.set_light_state(1, CommandLight.turn_on().with_bri(200))
    request = fake.last_request
    assert request.method == "PUT"
    assert str(request.url) == f"http://{BRIDGE_ADDRESS}/api/{USERNAME}/lights/1/state"
    assert json.loads(request.content) == {"on": True, "bri": 200}
    assert result.successes == {"/lights/1/state/on": True, "/lights/1/state/bri": 200}


def test_set_light_state_empty_command_is_sent(fake, authed):
    """Test that an empty command still reaches the bridge as ``{}``."""
    fake.response = httpx.Response(200, json=[{"success": {}}])
    result = authed.set_light_state(2, CommandLight.empty())
    assert fake.last_request.content == b"{}"
    assert result.successes == {}


def test_set_light_state_empty_answer_is_decode_error(fake, authed):
    """Test that an empty result array is never a success."""
    fake.response = httpx.Response(200, json=[])
    with pytest.raises(DecodeError):
        authed.set_light_state(2, CommandLight.turn_off())


def test_set_light_state_unknown_light(authed):
    """Test that a rejected change surfaces the bridge error."""
    with pytest.raises(BridgeError) as excinfo:
        authed.set_light_state(99, CommandLight.turn_off())
    assert excinfo.value.code == 3
    assert excinfo.value.address == "/lights/99"


@pytest.mark.parametrize("light_id", [-1, "1", True, 1.0])
def test_set_light_state_rejects_bad_ids(fake, authed, light_id):
    """Test that invalid light ids never reach the network."""
    with pytest.raises(ValidationError):
        authed.set_light_state(light_id, CommandLight.turn_on())
    assert fake.requests == []


def test_http_error_status_is_transport_error(fake, authed):
    """Test that HTTP error statuses become transport errors."""
    fake.response = httpx.Response(503, text="busy")
    with pytest.raises(TransportError) as excinfo:
        authed.get_all_lights()
    assert excinfo.value.status_code == 503


def test_connection_failure_is_transport_error(authed):
    """Test that network failures become transport errors."""

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    authed.transport._transport = httpx.MockTransport(refuse)
    with pytest.raises(TransportError) as excinfo:
        authed.get_all_lights()
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert excinfo.value.status_code is None


def test_invalid_json_is_decode_error(fake, authed):
    """Test that non-JSON answers are decode errors."""
    fake.response = httpx.Response(200, text="<html>hello</html>")
    with pytest.raises(DecodeError):
        authed.set_light_state(1, CommandLight.turn_on())


def test_discover_uses_given_lookup(fake):
    """Test discovery with a custom lookup."""
    bridge = Bridge.discover(discover=lambda: "10.0.0.5", transport=fake.transport())
    assert type(bridge) is Bridge
    assert bridge.address == "10.0.0.5"


def test_discover_failure_propagates():
    """Test that failing discovery is surfaced to the caller."""

    def nothing():
        raise DiscoveryError("no bridge found")

    with pytest.raises(DiscoveryError):
        Bridge.discover(discover=nothing)


def test_empty_address_rejected():
    """Test that a bridge needs an address."""
    with pytest.raises(ValidationError):
        Bridge("")


def test_context_manager_closes_transport(fake):
    """Test bridge as context manager."""
    with Bridge(BRIDGE_ADDRESS, transport=fake.transport()) as bridge:
        bridge.register_user("huebridge#tests", "abc1234567")
        assert bridge.transport._client is not None
    assert bridge.transport._client is None


@pytest.mark.parametrize("address", ["", None])
def test_discover_empty_lookup_result(address):
    """Test that a lookup without an address is a discovery failure."""
    with pytest.raises(DiscoveryError):
        Bridge.discover(discover=lambda: address)


def test_discover_default_lookup_uses_given_transport(fake):
    """Test that the discovery request goes through the caller's transport."""
    fake.response = httpx.Response(200, json=[{"id": "001788fffe100491", "internalipaddress": "10.0.0.8"}])
    transport = fake.transport()
    bridge = Bridge.discover(transport=transport)
    assert bridge.address == "10.0.0.8"
    assert bridge.transport is transport
    assert fake.last_request.url.host == "discovery.meethue.com"
