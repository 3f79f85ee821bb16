from sortie.core.security import create_access_token, decode_access_token, hash_password
from sortie.models.user import User

from conftest import ADMIN_PASSWORD


def test_admin_pages_redirect_to_login(client):
    response = client.get("/admin", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"].endswith("/login")
    assert "Please login" in response.cookies.get("flash_error")


def test_login_sets_token_cookie(client, admin):
    response = client.post(
        "/login",
        data={"email": admin.email, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"].endswith("/admin")
    assert decode_access_token(response.cookies.get("access_token")) == admin.id

    assert client.get("/admin").status_code == 200


def test_wrong_password(client, admin):
    response = client.post("/login", data={"email": admin.email, "password": "nope"})

    assert response.status_code == 401
    assert "Invalid email or password" in response.text


def test_login_page_skips_form_when_logged_in(admin_client):
    response = admin_client.get("/login", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"].endswith("/admin")


def test_logout_clears_cookie(client, admin):
    client.post("/login", data={"email": admin.email, "password": ADMIN_PASSWORD})

    response = client.post("/logout", follow_redirects=False)

    assert response.status_code == 303
    assert client.get("/admin", follow_redirects=False).status_code == 302


def test_non_admin_is_turned_away(client, db):
    user = User(email="guide@example.com", password_hash=hash_password("pw"), role="guide")
    db.add(user)
    db.commit()
    client.cookies.set("access_token", create_access_token(user.id))

    response = client.get("/admin/bookings", follow_redirects=False)

    assert response.status_code == 302
    assert "Admin access only" in response.cookies.get("flash_error")


def test_garbage_token(client):
    client.cookies.set("access_token", "not-a-jwt")

    response = client.get("/admin", follow_redirects=False)

    assert response.status_code == 302
    assert "Session expired" in response.cookies.get("flash_error")
