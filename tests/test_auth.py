from jose import jwt

from staffquiz.config import settings
from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def test_admin_login_returns_admin_token(client, admin):
    res = client.post("/auth/login-admin", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})

    assert res.status_code == 200
    body = res.json()
    assert body["token_type"] == "bearer"
    payload = jwt.decode(body["access_token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert payload["sub"] == admin.user_id
    assert payload["role"] == "admin"
    assert payload["exp"] > payload["iat"]


def test_admin_login_rejects_wrong_password(client, admin):
    res = client.post("/auth/login-admin", json={"email": ADMIN_EMAIL, "password": "nope"})

    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid Credentials"


def test_admin_login_rejects_unknown_email(client, admin):
    res = client.post("/auth/login-admin", json={"email": "who@staffquiz.org", "password": ADMIN_PASSWORD})

    assert res.status_code == 400


def test_employee_login_by_employee_id(client, make_employee):
    ann = make_employee("E100", "Ann")

    res = client.post("/auth/login-employee", json={"employee_id": " E100 "})

    assert res.status_code == 200
    payload = jwt.decode(res.json()["access_token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert payload["sub"] == ann.user_id
    assert payload["role"] == "employee"
    assert payload["employee_id"] == "E100"


def test_employee_login_unknown_or_blank_id(client, make_employee):
    make_employee("E100", "Ann")

    missing = client.post("/auth/login-employee", json={"employee_id": "E999"})
    blank = client.post("/auth/login-employee", json={"employee_id": "   "})

    assert missing.status_code == 400
    assert missing.json()["detail"] == "Employee ID not found."
    assert blank.status_code == 400
    assert blank.json()["detail"] == "Employee ID is required"


def test_requests_without_token_are_rejected(client):
    assert client.get("/users/details").status_code == 403
    assert client.get("/admin/staff").status_code == 403


def test_garbage_token_is_rejected(client):
    res = client.get("/users/details", headers={"Authorization": "Bearer not-a-jwt"})

    assert res.status_code == 403
    assert res.json()["detail"] == "Could not validate credentials"


def test_roles_are_enforced(client, admin_headers, make_employee, headers_for):
    employee_headers = headers_for(make_employee("E100", "Ann"))

    assert client.get("/admin/staff", headers=employee_headers).status_code == 403
    assert client.get("/users/quizzes", headers=admin_headers).status_code == 403
    assert client.get("/users/details", headers=admin_headers).status_code == 200


def test_token_of_deleted_user_is_not_found(client, db_session, make_employee, headers_for):
    ann = make_employee("E100", "Ann")
    headers = headers_for(ann)
    db_session.delete(ann)
    db_session.commit()

    assert client.get("/users/details", headers=headers).status_code == 404
