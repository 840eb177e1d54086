from app.core.auth import decode_access_token, hash_password
from app.users import service


def register(client, **overrides):
    body = {
        "FirstName": "Ada",
        "LastName": "Lovelace",
        "Username": "ada",
        "Email": "ada@example.com",
        "Password": "secret123",
    }
    body.update(overrides)
    return client.post("/auth/register", json=body)


def test_register_user(client, db):
    response = register(client)
    assert response.status_code == 201
    user = response.json()["data"]
    assert user["username"] == "ada"
    assert "password_hash" not in user
    assert db.users.docs[0]["password_hash"] == hash_password("secret123")


def test_register_duplicate_email(client):
    register(client)
    response = register(client, Username="ada2")
    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Email already in use", "error": "conflict"}


def test_register_duplicate_username(client):
    register(client)
    response = register(client, Email="other@example.com")
    assert response.status_code == 409
    assert response.json()["message"] == "Username already in use"


def test_register_invalid_email(client):
    response = register(client, Email="not-an-email")
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_login_by_username_and_email(client):
    user_id = register(client).json()["data"]["user_id"]

    for data in ("ada", "ada@example.com"):
        response = client.post("/auth/login", json={"Data": data, "Password": "secret123"})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login Successfully"
        assert decode_access_token(body["data"]["access_token"])["sub"] == user_id


def test_login_wrong_password(client):
    register(client)
    response = client.post("/auth/login", json={"Data": "ada", "Password": "nope"})
    assert response.status_code == 400
    assert response.json()["message"] == "Password Incorrect"


def test_login_garbage_identifier(client):
    response = client.post("/auth/login", json={"Data": "no spaces allowed", "Password": "x"})
    assert response.json()["message"] == "Password Incorrect"


async def never_seen(db, value):
    return False


def test_register_race_is_a_conflict(client, db, monkeypatch):
    # Both requests pass the lookup, the unique index decides
    monkeypatch.setattr(service, "is_email_in_use", never_seen)
    monkeypatch.setattr(service, "is_username_in_use", never_seen)
    db.users.unique("email").unique("username")

    register(client)
    response = register(client, Username="ada2")
    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Email already in use", "error": "conflict"}

    response = register(client, Email="other@example.com")
    assert response.status_code == 409
    assert response.json()["message"] == "Username already in use"
    assert len(db.users.docs) == 1
