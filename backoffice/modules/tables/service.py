from supabase import Client
from backoffice.core.exceptions import NotFoundError, require_key
from backoffice.modules.tables.schemas import (
    GovernedTableCreate, GovernedTableUpdate, GovernedTableResponse
)
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import HTTPException


class TableService:
    """Table Registry: the logical tables whose CRUD is governed by the permission matrix."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_tables(self) -> List[GovernedTableResponse]:
        """List governed tables ordered by display name"""
        try:
            result = self.supabase.table("permission_tables")\
                .select("*")\
                .order("display_name")\
                .execute()
            return [GovernedTableResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_table(self, table_name: str) -> Optional[GovernedTableResponse]:
        """Return the registry entry for table_name, or None when it is not governed"""
        result = self.supabase.table("permission_tables")\
            .select("*")\
            .eq("table_name", table_name)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return GovernedTableResponse(**result.data[0])

    def create_table(self, table_data: GovernedTableCreate) -> GovernedTableResponse:
        require_key(table_name=table_data.table_name, display_name=table_data.display_name)
        try:
            result = self.supabase.table("permission_tables").insert({
                "table_name": table_data.table_name.strip(),
                "display_name": table_data.display_name,
                "description": table_data.description
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to register table")

            return GovernedTableResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            # duplicate table_name comes back from the unique constraint
            raise HTTPException(status_code=400, detail=str(e))

    def update_table(self, table_id: str, table_data: GovernedTableUpdate) -> GovernedTableResponse:
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if table_data.display_name:
                update_data["display_name"] = table_data.display_name
            if table_data.description is not None:
                update_data["description"] = table_data.description

            result = self.supabase.table("permission_tables")\
                .update(update_data)\
                .eq("id", table_id)\
                .execute()

            if not result.data:
                raise NotFoundError("Table not found")

            return GovernedTableResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_table(self, table_id: str) -> bool:
        try:
            result = self.supabase.table("permission_tables")\
                .delete()\
                .eq("id", table_id)\
                .execute()
            if not result.data:
                raise NotFoundError("Table not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
