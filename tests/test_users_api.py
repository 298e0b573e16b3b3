"""
API tests for user administration.
"""


def test_admin_creates_user(client, admin, headers_for):
    response = client.post(
        "/api/users",
        json={"name": "Hana", "email": "hana@example.com", "role": "DIRECTOR", "department": "Sales"},
        headers=headers_for(admin),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "DIRECTOR"
    assert body["is_active"] is True


def test_duplicate_email_conflicts(client, admin, employee, headers_for):
    response = client.post(
        "/api/users",
        json={"name": "Copy", "email": employee.email},
        headers=headers_for(admin),
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "User already exists"


def test_non_admin_cannot_create_users(client, ceo, headers_for):
    response = client.post(
        "/api/users",
        json={"name": "Hana", "email": "hana@example.com"},
        headers=headers_for(ceo),
    )

    assert response.status_code == 403


def test_list_users_by_department(client, employee, director, sales_employee, headers_for):
    response = client.get(
        "/api/users", params={"department": "Engineering"}, headers=headers_for(employee)
    )

    assert [u["name"] for u in response.json()] == ["Diana", "Evan"]


def test_update_user(client, admin, employee, sales_employee, headers_for):
    response = client.patch(
        f"/api/users/{employee.id}",
        json={"department": "Sales", "role": "DIRECTOR"},
        headers=headers_for(admin),
    )
    taken = client.patch(
        f"/api/users/{employee.id}",
        json={"email": sales_employee.email},
        headers=headers_for(admin),
    )

    assert response.status_code == 200
    assert response.json()["department"] == "Sales"
    assert response.json()["role"] == "DIRECTOR"
    assert taken.status_code == 409


def test_null_fields_leave_user_unchanged(client, admin, employee, headers_for):
    response = client.patch(
        f"/api/users/{employee.id}",
        json={"name": None, "email": None, "role": None, "is_active": None},
        headers=headers_for(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Evan"
    assert body["email"] == employee.email
    assert body["role"] == "EMPLOYEE"
    assert body["is_active"] is True


def test_delete_user(client, admin, employee, headers_for):
    response = client.delete(f"/api/users/{employee.id}", headers=headers_for(admin))
    missing = client.delete(f"/api/users/{employee.id}", headers=headers_for(admin))

    assert response.status_code == 200
    assert missing.status_code == 404
