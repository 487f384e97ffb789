"""
Permissions and Roles Configuration
This config defines the role levels, the governed tables and the default
role x table CRUD matrix. Used by the seed script to populate the
permissoes, permission_tables and role_table_permissions tables.
"""

OPERATIONS = ("create", "read", "update", "delete")

# Role levels (permissoes.level) and their display labels
ROLES = {
    "admin": "Administrador",
    "operador": "Operador",
    "franqueado": "Franqueado",
    "user": "Usuário",
}

# Governed tables and their display metadata
GOVERNED_TABLES = {
    "franqueados": {
        "display_name": "Franqueados",
        "description": "Cadastro de franqueados"
    },
    "unidades": {
        "display_name": "Unidades",
        "description": "Unidades da rede"
    },
    "clientes": {
        "display_name": "Clientes",
        "description": "Clientes vinculados às unidades"
    },
    "colaboradores_interno": {
        "display_name": "Colaboradores Internos",
        "description": "Equipe interna da franqueadora"
    },
    "colaboradores_loja": {
        "display_name": "Colaboradores de Loja",
        "description": "Equipe das lojas"
    },
    "senhas": {
        "display_name": "Senhas",
        "description": "Credenciais de sistemas das unidades"
    },
    "grupos_whatsapp": {
        "display_name": "Grupos WhatsApp",
        "description": "Grupos de WhatsApp por unidade"
    },
    "permissoes": {
        "display_name": "Permissões",
        "description": "Perfis de acesso e matriz de permissões"
    },
    "audit_log": {
        "display_name": "Logs de Auditoria",
        "description": "Histórico de alterações em tabelas controladas"
    },
    "webhook_delivery_logs": {
        "display_name": "Logs de Entrega",
        "description": "Tentativas de envio de notificações e webhooks"
    },
    "webhook_subscriptions": {
        "display_name": "Webhooks",
        "description": "Assinaturas de webhooks de saída"
    },
    "comunicacoes": {
        "display_name": "Comunicações",
        "description": "Histórico de e-mails e mensagens de WhatsApp enviados"
    },
}

# System-written ledgers: rows are appended by their own services, never edited
# through the generic record path
LEDGER_TABLES = ("audit_log", "webhook_delivery_logs", "comunicacoes")

# Default grants per role. Tables not listed for a role get no row (deny-all).
ROLE_DEFAULTS = {
    "admin": {
        "*": ["create", "read", "update", "delete"],
        # ledgers are append-only; delivery logs keep the bulk purge
        "audit_log": ["create", "read"],
        "webhook_delivery_logs": ["create", "read", "delete"],
        "comunicacoes": ["create", "read"],
    },
    "operador": {
        "franqueados": ["create", "read", "update"],
        "unidades": ["create", "read", "update"],
        "clientes": ["create", "read", "update"],
        "colaboradores_loja": ["create", "read", "update"],
        "senhas": ["read"],
        "grupos_whatsapp": ["read", "update"],
    },
    "franqueado": {
        "unidades": ["read"],
        "colaboradores_loja": ["create", "read", "update", "delete"],
    },
    "user": {},
}


def get_role_matrix():
    """
    Returns the default role x table matrix as a list of rows ready for upsert
    Format: [
        {"role": "operador", "table_name": "senhas",
         "can_create": False, "can_read": True, "can_update": False, "can_delete": False},
        ...
    ]
    """
    rows = []
    for role, grants in ROLE_DEFAULTS.items():
        for table_name in GOVERNED_TABLES:
            actions = grants.get(table_name, grants.get("*"))
            if actions is None:
                continue
            rows.append({
                "role": role,
                "table_name": table_name,
                **{f"can_{op}": op in actions for op in OPERATIONS}
            })
    return rows


# Export the matrix for use in seed scripts
ROLE_MATRIX = get_role_matrix()
