import httpx
import pytest

from core.auth import AuthError, AuthGate, IdentityClient


def make_client(status_code=200, payload=None, seen=None):
    def handler(request):
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload or {})

    return IdentityClient("api-key", transport=httpx.MockTransport(handler))


def test_sign_in_success():
    seen = []
    client = make_client(payload={"localId": "u1", "email": "admin@hostel.com",
                                  "idToken": "tok", "refreshToken": "ref"}, seen=seen)

    identity = client.sign_in("admin@hostel.com", "secreto")

    assert identity.uid == "u1"
    assert identity.id_token == "tok"
    assert seen[0].url.path.endswith("signInWithPassword")
    assert seen[0].url.params["key"] == "api-key"


def test_sign_in_maps_provider_error():
    client = make_client(400, {"error": {"message": "INVALID_PASSWORD : bad"}})

    with pytest.raises(AuthError) as exc:
        client.sign_in("admin@hostel.com", "mala")
    assert exc.value.message == "Usuario o contraseña incorrectos"
    assert exc.value.status_code == 400


def test_sign_in_requires_credentials():
    with pytest.raises(AuthError):
        make_client().sign_in("", "")


def test_network_error_becomes_auth_error():
    def handler(request):
        raise httpx.ConnectError("sin red")

    client = IdentityClient("api-key", transport=httpx.MockTransport(handler))
    with pytest.raises(AuthError):
        client.sign_in("admin@hostel.com", "secreto")


def test_gate_notifies_listeners():
    gate = AuthGate(make_client(payload={"localId": "u1", "email": "admin@hostel.com"}))
    events = []
    unsubscribe = gate.subscribe(events.append)

    gate.sign_in("admin@hostel.com", "secreto")
    assert gate.is_authenticated
    gate.sign_out()
    assert not gate.is_authenticated
    assert [e.email if e else None for e in events] == ["admin@hostel.com", None]

    unsubscribe()
    gate.sign_in("admin@hostel.com", "secreto")
    assert len(events) == 2


def test_failed_sign_in_keeps_signed_out():
    gate = AuthGate(make_client(400, {"error": {"message": "EMAIL_NOT_FOUND"}}))
    events = []
    gate.subscribe(events.append)

    with pytest.raises(AuthError):
        gate.sign_in("x@hostel.com", "secreto")
    assert gate.identity is None
    assert events == []


def test_one_client_serves_several_sessions_and_closes():
    with make_client(payload={"localId": "u1", "email": "admin@hostel.com"}) as client:
        first, second = AuthGate(client), AuthGate(client)
        first.sign_in("admin@hostel.com", "secreto")
        first.sign_out()
        second.sign_in("admin@hostel.com", "secreto")
        assert second.is_authenticated
        assert not client._client.is_closed
    assert client._client.is_closed
