import types
from providers_hub import config
from providers_hub.auth.models import AUTH_SERVICE_ERROR, AuthResponse, make_auth_response
from providers_hub.auth import service as svc

def test_login_success(monkeypatch):
    calls = {}
    def fake_sign_in(email, password):
        calls["email"] = email
        calls["password"] = password
        return {"ok": True}

    def fake_make_auth_response(res, fallback_error=None):
        return AuthResponse(True, user={"id": "u1"}, session={"access_token": "t"})

    monkeypatch.setattr(svc, "sign_in_password", fake_sign_in)
    monkeypatch.setattr(svc, "make_auth_response", fake_make_auth_response)

    res = svc.login(" user@example.com ", "pwd")
    assert res.success is True
    assert res.access_token == "t"
    assert calls["email"] == "user@example.com"
    assert calls["password"] == "pwd"

def test_login_exception(monkeypatch):
    def fake_sign_in(email, password):
        raise RuntimeError("boom")

    def fake_handle(op, e):
        return AuthResponse(False, error="handled")

    monkeypatch.setattr(svc, "sign_in_password", fake_sign_in)
    monkeypatch.setattr(svc, "auth_failure", fake_handle)

    res = svc.login("x@y", "z")
    assert res.success is False
    assert res.error == "handled"

def test_signup_sends_name_role_and_redirect(monkeypatch):
    calls = {}
    monkeypatch.setattr(config, "SIGNUP_REDIRECT_URL", "https://care.example.com/auth/callback")

    def fake_sign_up_account(email, password, metadata, redirect_to=None):
        calls["email"] = email
        calls["metadata"] = metadata
        calls["redirect"] = redirect_to
        return types.SimpleNamespace(session=None, user=types.SimpleNamespace(id="u1"))

    monkeypatch.setattr(svc, "sign_up_account", fake_sign_up_account)

    res = svc.signup(" jane@example.com ", "S3cret!pw")
    assert res.success is True
    assert res.requires_confirmation is True
    assert res.access_token is None
    assert calls["email"] == "jane@example.com"
    assert calls["metadata"] == {"name": "jane", "role": "client"}
    assert calls["redirect"] == "https://care.example.com/auth/callback"

def test_signup_with_session_needs_no_confirmation(monkeypatch):
    session = types.SimpleNamespace(access_token="abc", refresh_token="r")
    user = types.SimpleNamespace(id="u2", email="pro@example.com", user_metadata={"name": "Pro", "role": "provider"})
    monkeypatch.setattr(svc, "sign_up_account", lambda *args, **kwargs: types.SimpleNamespace(session=session, user=user))

    res = svc.signup("pro@example.com", "S3cret!pw", name="Pro", role="provider")
    assert res.success is True
    assert res.requires_confirmation is False
    assert res.access_token == "abc"
    assert res.user["role"] == "provider"

def test_signup_unknown_role_falls_back_to_client(monkeypatch):
    calls = {}
    def fake_sign_up_account(email, password, metadata, redirect_to=None):
        calls["metadata"] = metadata
        return types.SimpleNamespace(session=None)
    monkeypatch.setattr(svc, "sign_up_account", fake_sign_up_account)

    svc.signup("x@example.com", "S3cret!pw", name="X", role="admin")
    assert calls["metadata"]["role"] == "client"

def test_signup_existing_user(monkeypatch):
    def fake_sign_up_account(*args, **kwargs):
        raise RuntimeError("User already registered")
    monkeypatch.setattr(svc, "sign_up_account", fake_sign_up_account)

    res = svc.signup("exists@example.com", "S3cret!pw")
    assert res.success is False
    assert res.error == "User already registered"

def test_update_password_error_message(monkeypatch):
    class _Resp:
        status_code = 422
        text = "unprocessable"
        def json(self):
            return {"msg": "Password should be different"}
    monkeypatch.setattr(svc, "put_user_password", lambda token, pwd: _Resp())

    res = svc.update_password("tok", "N3w!password")
    assert res.success is False
    assert "Password should be different" in res.error

def test_get_user_from_token_normalizes(monkeypatch):
    monkeypatch.setattr(
        svc,
        "fetch_user",
        lambda token: {"id": "u1", "email": "a@example.com", "user_metadata": {"name": "A", "role": "provider"}},
    )
    user = svc.get_user_from_token("tok")
    assert user == {
        "id": "u1",
        "email": "a@example.com",
        "name": "A",
        "role": "provider",
        "metadata": {"name": "A", "role": "provider"},
        "token": "tok",
    }

def test_make_auth_response_without_session_is_failure():
    res = make_auth_response(types.SimpleNamespace(session=None, user=None), fallback_error="nope")
    assert res.success is False
    assert res.error == "nope"

def test_unexpected_error_returns_generic_message(monkeypatch):
    def fake_sign_in(email, password):
        raise RuntimeError("connection reset by gotrue-internal:9999")
    monkeypatch.setattr(svc, "sign_in_password", fake_sign_in)

    res = svc.login("x@example.com", "pwd")
    assert res.success is False
    assert res.error == AUTH_SERVICE_ERROR
    assert "gotrue-internal" not in res.error
