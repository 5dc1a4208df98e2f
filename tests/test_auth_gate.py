"""
Request authentication through the accessToken cookie or bearer header
"""

from app.core.dependencies import ACCESS_TOKEN_COOKIE

CURRENT_USER_URL = "/api/v1/users/current-user"


async def test_missing_token_is_unauthorized(client):
    response = await client.get(CURRENT_USER_URL)

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["statusCode"] == 401
    assert response.headers["www-authenticate"] == "Bearer"


async def test_bearer_header_authenticates(client, make_user, auth_headers):
    user = await make_user("bob")

    response = await client.get(CURRENT_USER_URL, headers=auth_headers(user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "bob"
    assert "password" not in data
    assert "refreshToken" not in data


async def test_cookie_takes_precedence_over_header(client, make_user, auth_headers, token_service):
    cookie_user = await make_user("cookieuser")
    header_user = await make_user("headeruser")

    client.cookies.set(ACCESS_TOKEN_COOKIE, token_service.issue_access_token(cookie_user))
    response = await client.get(CURRENT_USER_URL, headers=auth_headers(header_user))

    assert response.status_code == 200
    assert response.json()["data"]["username"] == "cookieuser"


async def test_invalid_token_is_unauthorized(client):
    response = await client.get(CURRENT_USER_URL, headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid access token"


async def test_refresh_token_is_not_an_access_token(client, make_user, token_service):
    user = await make_user()

    response = await client.get(
        CURRENT_USER_URL,
        headers={"Authorization": f"Bearer {token_service.issue_refresh_token(user)}"}
    )

    assert response.status_code == 401


async def test_token_of_deleted_user_is_unauthorized(client, make_user, auth_headers, db_session):
    user = await make_user()
    headers = auth_headers(user)

    await db_session.delete(user)
    await db_session.commit()

    response = await client.get(CURRENT_USER_URL, headers=headers)

    assert response.status_code == 401
