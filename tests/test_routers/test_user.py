from auth import jwt as jwt_lib
from auth.tokens import TokenIssuer


def _login(client) -> str:
    resp = client.post("/login", json={"username": "kinjal", "password": "123456"})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def test_user_with_valid_token(client):
    token = _login(client)
    resp = client.get("/user", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200, resp.text
    assert resp.json() == {"msg": "Hello there!", "user_id": 4}


def test_user_without_header(client):
    resp = client.get("/user")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized: No token found"}
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_user_with_basic_scheme(client):
    resp = client.get("/user", headers={"Authorization": "Basic xyz"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized: No token found"}


def test_user_with_garbage_token(client):
    resp = client.get("/user", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expired or couldn't be verified!"}


def test_user_with_token_from_other_secret(client):
    forged = TokenIssuer("another-secret-that-the-server-does-not-hold").issue(4)
    resp = client.get("/user", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expired or couldn't be verified!"}


def test_user_with_expired_token(make_client, secret):
    client = make_client(jwt_expires_seconds=60)
    now = jwt_lib.now_ts()
    expired = jwt_lib.encode({"sub": 4, "iat": now - 120, "exp": now - 60}, secret)
    resp = client.get("/user", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expired or couldn't be verified!"}


def test_user_returns_string_identity(make_client):
    client = make_client(users=({"username": "alice", "password": "p@ss", "user_id": "alice-id"},))
    resp = client.post("/login", json={"username": "alice", "password": "p@ss"})
    token = resp.json()["token"]
    resp = client.get("/user", headers={"Authorization": f"Bearer {token}"})
    assert resp.json() == {"msg": "Hello there!", "user_id": "alice-id"}


def test_tokens_survive_app_restart_with_same_secret(make_client):
    token = _login(make_client())
    resp = make_client().get("/user", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


def test_user_with_deeply_nested_header_is_unauthorized(client):
    header_b64 = jwt_lib._b64url_encode(b"[" * 3000)
    resp = client.get("/user", headers={"Authorization": f"Bearer {header_b64}.e30.c2ln"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Token expired or couldn't be verified!"}
