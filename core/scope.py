"""Tenant visibility for admin-facing queries.

A SUPER_ADMIN sees every row (GlobalScope). An ADMIN sees only rows whose
company_tag equals their own (TenantScope). An ADMIN with no tag gets
TenantScope(None), which matches nothing: SQL `company_tag = NULL` is
never true.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GlobalScope:
    """Unrestricted, cross-tenant visibility."""

    def allows(self, company_tag: str | None) -> bool:
        return True


@dataclass(frozen=True)
class TenantScope:
    """Visibility limited to one company tag."""

    tag: str | None

    def allows(self, company_tag: str | None) -> bool:
        return self.tag is not None and company_tag == self.tag


Scope = GlobalScope | TenantScope


def scope_filter(scope: Scope, column: str) -> tuple[str, tuple[Any, ...]]:
    """SQL condition and params restricting `column` to the scope.

    Returns:
        ("TRUE", ()) for GlobalScope, ("<column> = %s", (tag,)) otherwise.
    """
    if isinstance(scope, GlobalScope):
        return "TRUE", ()
    if isinstance(scope, TenantScope):
        return f"{column} = %s", (scope.tag,)
    raise TypeError(f"Unknown scope type: {type(scope).__name__}")
