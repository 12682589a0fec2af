from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.sql import Select

from app.platform.security.conditions import RLSConditions, directory_conditions, table_conditions
from app.platform.security.context import UserScope
from app.platform.security.rls import (
    apply_rls_filter,
    merge_requested_filters,
    validate_rls_read_scope,
    validate_rls_write,
)


class BaseRepository:
    resource = ""
    table = ""
    model: type[Any] | None = None

    def scope_conditions(self, user_scope: UserScope, requested: Mapping[str, int | None] | None = None) -> RLSConditions:
        conditions = table_conditions(user_scope, self.table)
        return merge_requested_filters(self.resource, user_scope, conditions, requested or {})

    def apply_scope_query(
        self,
        query: Select[Any],
        user_scope: UserScope,
        *,
        requested: Mapping[str, int | None] | None = None,
    ) -> Select[Any]:
        return apply_rls_filter(query, self._model(), self.scope_conditions(user_scope, requested))

    def validate_read_scope(self, user_scope: UserScope, record: Mapping[str, Any], *, action: str = "read") -> None:
        validate_rls_read_scope(self.resource, self.table, user_scope, record, action=action)

    def validate_write_security(self, payload: Mapping[str, Any], user_scope: UserScope, *, action: str = "write") -> None:
        validate_rls_write(self.resource, payload, user_scope, action=action)

    def _model(self) -> type[Any]:
        if self.model is None:
            raise NotImplementedError(f"{type(self).__name__} does not declare a model")
        return self.model


class DirectoryRepository(BaseRepository):
    """Repository over an organizational table whose rows are themselves scope targets."""

    def scope_conditions(self, user_scope: UserScope, requested: Mapping[str, int | None] | None = None) -> RLSConditions:
        conditions = super().scope_conditions(user_scope, requested)
        return directory_conditions(user_scope, self.table, conditions)
