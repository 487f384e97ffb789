# ruff: noqa

"""Effective permission resolution: override > role grant > deny."""

from __future__ import annotations

import pytest

from backoffice.config.permissions_config import GOVERNED_TABLES, OPERATIONS
from backoffice.modules.permissions.resolver import PermissionResolver, resolve_permission
from backoffice.modules.permissions.schemas import PermissionFlags
from backoffice.modules.permissions.service import UserPermissionService
from backoffice.modules.roles.service import UserRoleService


def _row(*ops: str) -> dict:
    return {f"can_{op}": op in ops for op in OPERATIONS}


@pytest.mark.parametrize("operation", OPERATIONS)
def test_override_answers_regardless_of_role(operation: str) -> None:
    grant_all = _row(*OPERATIONS)
    deny_all = _row()
    assert resolve_permission(deny_all, "admin", grant_all, operation) is False
    assert resolve_permission(grant_all, None, None, operation) is True


def test_no_role_denies_everything() -> None:
    for operation in OPERATIONS:
        assert resolve_permission(None, None, _row(*OPERATIONS), operation) is False


def test_role_without_grant_denies() -> None:
    assert resolve_permission(None, "operador", None, "read") is False


def test_role_grant_flag_is_the_answer() -> None:
    grant = _row("read")
    assert resolve_permission(None, "operador", grant, "read") is True
    assert resolve_permission(None, "operador", grant, "update") is False


def test_unknown_operation_is_denied() -> None:
    assert resolve_permission(_row(*OPERATIONS), "admin", _row(*OPERATIONS), "truncate") is False


def test_operador_reads_senhas_until_override(db, grant) -> None:
    grant(db, "operador", "senhas", "read")
    UserRoleService(db).assign_user_role("u1", "operador")
    resolver = PermissionResolver(db)

    assert resolver.get_effective_permission("u1", "senhas", "read") is True
    assert resolver.get_effective_permission("u1", "senhas", "update") is False

    overrides = UserPermissionService(db)
    overrides.upsert_user_override(
        "u1", "senhas", PermissionFlags(can_read=False, can_update=True), created_by="admin-1"
    )
    assert resolver.get_effective_permission("u1", "senhas", "read") is False
    assert resolver.get_effective_permission("u1", "senhas", "update") is True

    assert overrides.delete_user_override("u1", "senhas") is True
    assert resolver.get_effective_permission("u1", "senhas", "read") is True
    assert resolver.get_effective_permission("u1", "senhas", "update") is False


def test_user_without_role_is_denied_on_every_table(db, grant) -> None:
    grant(db, "admin", "clientes", *OPERATIONS)
    resolver = PermissionResolver(db)
    for table_name in GOVERNED_TABLES:
        for operation in OPERATIONS:
            assert resolver.get_effective_permission("nobody", table_name, operation) is False


def test_override_applies_even_without_role(db) -> None:
    UserPermissionService(db).upsert_user_override("u2", "clientes", PermissionFlags(can_read=True))
    resolver = PermissionResolver(db)
    assert resolver.get_effective_permission("u2", "clientes", "read") is True
    assert resolver.get_effective_permission("u2", "clientes", "delete") is False


def test_override_is_all_or_nothing(db, grant) -> None:
    grant(db, "operador", "clientes", "create", "read", "update")
    UserRoleService(db).assign_user_role("u3", "operador")
    UserPermissionService(db).upsert_user_override("u3", "clientes", PermissionFlags(can_delete=True))
    resolver = PermissionResolver(db)
    # flags left false in the override are not filled in from the role grant
    assert resolver.get_effective_permission("u3", "clientes", "read") is False
    assert resolver.get_effective_permission("u3", "clientes", "delete") is True


def test_store_failure_resolves_to_false(db, grant) -> None:
    grant(db, "operador", "senhas", "read")
    UserRoleService(db).assign_user_role("u1", "operador")
    db.fail("user_table_permissions", "select")
    assert PermissionResolver(db).get_effective_permission("u1", "senhas", "read") is False


def test_empty_arguments_resolve_to_false(db) -> None:
    resolver = PermissionResolver(db)
    assert resolver.get_effective_permission("", "senhas", "read") is False
    assert resolver.get_effective_permission("u1", "", "read") is False
    assert resolver.get_effective_permission("u1", "senhas", "") is False
    assert db.calls == []


def test_request_cache_avoids_refetching(db, grant) -> None:
    grant(db, "operador", "senhas", "read")
    UserRoleService(db).assign_user_role("u1", "operador")
    resolver = PermissionResolver(db, cache={})

    resolver.get_effective_permission("u1", "senhas", "read")
    calls = len(db.calls)
    resolver.get_effective_permission("u1", "senhas", "update")
    assert len(db.calls) == calls


def test_effective_permissions_reports_source(db, grant) -> None:
    grant(db, "operador", "senhas", "read")
    UserRoleService(db).assign_user_role("u1", "operador")
    UserPermissionService(db).upsert_user_override("u1", "clientes", PermissionFlags(can_read=True))

    matrix = {m.table_name: m for m in PermissionResolver(db).effective_permissions("u1")}

    assert set(matrix) == set(GOVERNED_TABLES)
    assert matrix["senhas"].source == "role"
    assert matrix["senhas"].effective.can_read is True
    assert matrix["senhas"].effective.can_update is False
    assert matrix["clientes"].source == "override"
    assert matrix["clientes"].role_grant is None
    assert matrix["unidades"].source == "none"
    assert matrix["unidades"].effective == PermissionFlags()


def test_effective_permissions_empty_on_store_failure(db) -> None:
    db.fail("permission_tables", "select")
    assert PermissionResolver(db).effective_permissions("u1") == []
