from uuid import UUID

from conftest import API, PASSWORD, register

from rento.core.security import create_token


async def test_register_returns_tokens_and_user(client):
    user, headers = await register(client, "Priya Nair", "Priya@Rento.io", "renter")

    assert user["email"] == "priya@rento.io"
    assert user["role"] == "renter"

    response = await client.get(f"{API}/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == user["id"]


async def test_register_duplicate_email(client, renter):
    response = await client.post(
        f"{API}/auth/register",
        json={"name": "Priya", "email": "priya@rento.io", "password": PASSWORD, "role": "renter"},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Email already registered"


async def test_register_rejects_unknown_role(client):
    response = await client.post(
        f"{API}/auth/register",
        json={"name": "Admin", "email": "admin@rento.io", "password": PASSWORD, "role": "admin"},
    )

    assert response.status_code == 422


async def test_register_rejects_weak_password(client):
    response = await client.post(
        f"{API}/auth/register",
        json={"name": "Dev", "email": "dev@rento.io", "password": "onlyletters", "role": "owner"},
    )

    assert response.status_code == 422


async def test_login_and_refresh(client, owner):
    response = await client.post(
        f"{API}/auth/login", json={"email": "arjun@rento.io", "password": PASSWORD}
    )
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["user"]["role"] == "owner"

    refreshed = await client.post(
        f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
    )
    assert refreshed.status_code == 200
    assert refreshed.json()["user"]["email"] == "arjun@rento.io"


async def test_login_wrong_password(client, owner):
    response = await client.post(
        f"{API}/auth/login", json={"email": "arjun@rento.io", "password": "Wrong12345"}
    )

    assert response.status_code == 401


async def test_refresh_rejects_access_token(client):
    _, headers = await register(client, "Kabir Rao", "kabir@rento.io", "renter")
    access_token = headers["Authorization"].removeprefix("Bearer ")

    response = await client.post(f"{API}/auth/refresh", json={"refresh_token": access_token})

    assert response.status_code == 401


async def test_token_for_another_role_is_rejected(client, renter):
    user, _ = renter
    token = create_token(UUID(user["id"]), "owner")

    response = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Token was issued for a different account role"


async def test_me_requires_token(client):
    response = await client.get(f"{API}/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Access denied"


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
