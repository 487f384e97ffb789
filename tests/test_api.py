# ruff: noqa

"""HTTP surface: guards, generic denials and the main admin flows."""

from __future__ import annotations


API = "/api/v1"


def test_health_and_security_headers(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_invalid_token_is_unauthorized(client) -> None:
    response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_me_returns_effective_matrix(client, operador_headers) -> None:
    response = client.get(f"{API}/auth/me", headers=operador_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "op-1"
    assert body["is_super_user"] is False
    senhas = next(p for p in body["permissions"] if p["table_name"] == "senhas")
    assert senhas["effective"]["can_read"] is True
    assert senhas["effective"]["can_update"] is False
    assert senhas["source"] == "role"


def test_denial_is_generic(client, operador_headers) -> None:
    response = client.get(f"{API}/audit-logs", headers=operador_headers)
    assert response.status_code == 403
    assert response.json() == {"detail": "Forbidden"}


def test_effective_permission_for_self(client, operador_headers) -> None:
    response = client.get(
        f"{API}/permissions/effective",
        params={"table_name": "senhas", "operation": "read"},
        headers=operador_headers,
    )
    assert response.status_code == 200
    assert response.json()["allowed"] is True


def test_effective_permission_for_other_user_requires_matrix_read(
    client, operador_headers, admin_headers
) -> None:
    params = {"table_name": "senhas", "operation": "read", "user_id": "admin-1"}
    assert client.get(f"{API}/permissions/effective", params=params, headers=operador_headers).status_code == 403

    params["user_id"] = "op-1"
    response = client.get(f"{API}/permissions/effective", params=params, headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"user_id": "op-1", "table_name": "senhas", "operation": "read", "allowed": True}


def test_override_flow(client, db, admin_headers, operador_headers) -> None:
    response = client.put(
        f"{API}/permissions/users/op-1",
        json={"table_name": "senhas", "can_read": False, "can_update": True},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["created_by"] == "admin-1"

    check = {"table_name": "senhas", "operation": "update"}
    assert client.get(f"{API}/permissions/effective", params=check, headers=operador_headers).json()["allowed"] is True

    response = client.delete(f"{API}/permissions/users/op-1/senhas", headers=admin_headers)
    assert response.status_code == 204
    assert client.get(f"{API}/permissions/effective", params=check, headers=operador_headers).json()["allowed"] is False


def test_role_matrix_upsert_rejects_empty_role(client, admin_headers) -> None:
    response = client.put(
        f"{API}/permissions/roles",
        json={"role": " ", "table_name": "senhas", "can_read": True},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_role_matrix_upsert_and_list(client, admin_headers) -> None:
    body = {"role": "franqueado", "table_name": "senhas", "can_read": True}
    assert client.put(f"{API}/permissions/roles", json=body, headers=admin_headers).status_code == 200
    assert client.put(f"{API}/permissions/roles", json=body, headers=admin_headers).status_code == 200

    rows = client.get(f"{API}/permissions/roles", params={"role": "franqueado"}, headers=admin_headers).json()
    assert [(r["table_name"], r["can_read"]) for r in rows] == [("senhas", True)]


def test_assign_role_and_list_users(client, db, admin_headers) -> None:
    db._insert("profiles", {"user_id": "u9", "full_name": "Bruno"})
    response = client.put(f"{API}/users/u9/role", json={"role": "franqueado"}, headers=admin_headers)
    assert response.status_code == 200

    user = client.get(f"{API}/users/u9", headers=admin_headers).json()
    assert user["role"] == "franqueado"
    assert client.put(f"{API}/users/u9/role", json={"role": "ghost"}, headers=admin_headers).status_code == 400


def test_governed_record_routes(client, admin_headers, operador_headers) -> None:
    response = client.post(f"{API}/records/clientes", json={"nome": "Maria"}, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["state"] == "audited"

    denied = client.post(f"{API}/records/senhas", json={"sistema": "erp"}, headers=operador_headers)
    assert denied.status_code == 403

    logs = client.get(f"{API}/audit-logs", params={"table_name": "clientes"}, headers=admin_headers).json()
    assert logs["error"] is None
    assert [(e["action"], e["user_full_name"]) for e in logs["logs"]] == [("create", "Ana Admin")]


def test_audit_post_is_best_effort(client, db, admin_headers) -> None:
    entry = {"action": "update", "table_name": "clientes", "record_id": "c1"}
    assert client.post(f"{API}/audit-logs", json=entry, headers=admin_headers).json()["recorded"] is True

    db.fail("audit_log", "insert")
    response = client.post(f"{API}/audit-logs", json=entry, headers=admin_headers)
    assert response.status_code == 202
    assert response.json() == {"recorded": False, "id": None}


def test_delivery_log_routes(client, admin_headers) -> None:
    for attempt in (1, 2, 3):
        response = client.post(
            f"{API}/delivery-logs",
            json={"attempt": attempt, "request_body": {"event": "x"}, "success": attempt == 3},
            headers=admin_headers,
        )
        assert response.status_code == 201

    assert len(client.get(f"{API}/delivery-logs", headers=admin_headers).json()["logs"]) == 3
    assert client.delete(f"{API}/delivery-logs", headers=admin_headers).json() == {"deleted": 3}
    assert client.get(f"{API}/delivery-logs", headers=admin_headers).json()["logs"] == []


def test_super_user_bypasses_route_guards(client, db) -> None:
    db.auth.add_user("root-token", "root-1", app_metadata={"type": "super_user"})
    response = client.get(f"{API}/roles", headers={"Authorization": "Bearer root-token"})
    assert response.status_code == 200
    assert {r["level"] for r in response.json()} == {"admin", "operador", "franqueado", "user"}


def test_audit_row_cannot_be_rewritten_or_deleted_via_records(client, db, admin_headers) -> None:
    entry = {"action": "update", "table_name": "clientes", "record_id": "c1", "new_record_data": {"nome": "A"}}
    audit_id = client.post(f"{API}/audit-logs", json=entry, headers=admin_headers).json()["id"]

    forged = {"new_record_data": {"nome": "FORGED"}, "user_id": "someone-else"}
    assert client.put(f"{API}/records/audit_log/{audit_id}", json=forged, headers=admin_headers).status_code == 403
    assert client.delete(f"{API}/records/audit_log/{audit_id}", headers=admin_headers).status_code == 403

    logs = client.get(f"{API}/audit-logs", headers=admin_headers).json()["logs"]
    assert [(e["id"], e["user_id"], e["new_record_data"]) for e in logs] == [(audit_id, "admin-1", {"nome": "A"})]


def test_audit_post_requires_the_claimed_right(client, db, grant, operador_headers) -> None:
    entry = {"action": "read", "table_name": "senhas", "record_id": "s1"}
    # no right on the audit ledger at all
    assert client.post(f"{API}/audit-logs", json=entry, headers=operador_headers).status_code == 403

    grant(db, "operador", "audit_log", "create")
    denied = client.post(
        f"{API}/audit-logs", json={**entry, "action": "delete"}, headers=operador_headers
    )
    assert denied.status_code == 403
    assert denied.json() == {"detail": "Forbidden"}
    assert db.rows("audit_log") == []

    allowed = client.post(f"{API}/audit-logs", json=entry, headers=operador_headers)
    assert allowed.status_code == 202
    assert allowed.json()["recorded"] is True


def test_user_role_lookup_and_listing(client, db, admin_headers) -> None:
    assert client.get(f"{API}/users/u9/role", headers=admin_headers).json() == {"user_id": "u9", "role": None}

    client.put(f"{API}/users/u9/role", json={"role": "franqueado"}, headers=admin_headers)
    assert client.get(f"{API}/users/u9/role", headers=admin_headers).json() == {"user_id": "u9", "role": "franqueado"}

    listing = client.get(f"{API}/users/roles", params={"role": "franqueado"}, headers=admin_headers).json()
    assert [(r["user_id"], r["role"]) for r in listing] == [("u9", "franqueado")]
    everyone = client.get(f"{API}/users/roles", headers=admin_headers).json()
    assert {r["user_id"] for r in everyone} == {"admin-1", "u9"}
