import json
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from core.config import settings
from core.errors import CatalogError, UnknownRoleError
from core.logging_config import logger
from models.enums import Permission, Role


RolePermissionTable = Mapping[Role, FrozenSet[Permission]]


# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
DEFAULT_ROLE_PERMISSIONS: Dict[Role, list] = {

    # =====================================================
    # GLOBAL ADMIN — all permissions across all stores
    # =====================================================
    Role.global_admin: [Permission.all],


    # =====================================================
    # STORE ADMIN — runs one store
    # =====================================================
    Role.store_admin: [
        Permission.manage_store,
        Permission.manage_store_users,
        Permission.manage_leads,
        Permission.manage_inventory,
        Permission.match_engine,
        Permission.view_analytics,
        Permission.create_sales,
        Permission.view_reports,
        Permission.manage_test_rides,
        Permission.view_leads,
        Permission.view_inventory,
        Permission.update_lead_status,
        Permission.schedule_followups,
        Permission.send_messages,
        Permission.export_data,
        Permission.manage_store_analytics,
        Permission.approve_sales,
    ],


    # =====================================================
    # SALES EXECUTIVE — leads and sales in one store
    # =====================================================
    Role.sales_executive: [
        Permission.manage_leads,
        Permission.view_inventory,
        Permission.match_engine,
        Permission.create_sales,
        Permission.manage_test_rides,
        Permission.send_messages,
        Permission.schedule_followups,
        Permission.view_leads,
        Permission.update_lead_status,
        Permission.view_basic_analytics,
        Permission.generate_leads,
    ],


    # =====================================================
    # PROCUREMENT ADMIN — procurement for one city
    # =====================================================
    Role.procurement_admin: [
        Permission.manage_procurement,
        Permission.manage_city_inventory,
        Permission.create_procurement_users,
        Permission.manage_procurement_users,
        Permission.approve_vehicle_acquisition,
        Permission.assign_inventory_to_stores,
        Permission.view_procurement_analytics,
        Permission.manage_vehicle_verification,
        Permission.set_procurement_targets,
        Permission.approve_procurement_expenses,
        Permission.view_city_inventory,
        Permission.manage_vendor_relationships,
        Permission.review_vehicle_assessments,
        Permission.export_procurement_data,
    ],


    # =====================================================
    # PROCUREMENT EXECUTIVE — field sourcing & verification
    # =====================================================
    Role.procurement_executive: [
        Permission.hunt_vehicles,
        Permission.verify_vehicles,
        Permission.photograph_vehicles,
        Permission.score_vehicles,
        Permission.submit_vehicle_reports,
        Permission.record_payment_proof,
        Permission.update_vehicle_status,
        Permission.view_assigned_vehicles,
        Permission.manage_vehicle_documents,
        Permission.track_vehicle_acquisition,
        Permission.communicate_with_vendors,
        Permission.submit_expense_claims,
    ],
}


# -----------------------------------------------------
# Table construction + invariants
# -----------------------------------------------------
def validate_role_permissions(table: Mapping) -> None:
    """
    Raise CatalogError unless:
      • every role has an entry
      • every entry is non-empty
      • global_admin is exactly {all}
    """
    missing = [role.value for role in Role if role not in table]
    if missing:
        raise CatalogError(f"Roles without permissions: {', '.join(missing)}")

    for role, perms in table.items():
        if not perms:
            raise CatalogError(f"Role '{role}' maps to an empty permission set")

    if frozenset(table[Role.global_admin]) != frozenset({Permission.all}):
        raise CatalogError("global_admin must map to exactly {'all'}")


def build_role_permissions(raw: Mapping) -> RolePermissionTable:
    """Turn a {role: [permission literals]} mapping into a validated, read-only table."""
    table = {}

    for raw_role, raw_perms in raw.items():
        role = Role.parse(raw_role)
        if role is None:
            raise CatalogError(f"Unknown role in permission table: {raw_role!r}")

        if isinstance(raw_perms, (str, bytes)) or not isinstance(raw_perms, Iterable):
            raise CatalogError(f"Permissions for '{role}' must be a list")

        perms = set()
        for raw_perm in raw_perms:
            perm = Permission.parse(raw_perm)
            if perm is None:
                raise CatalogError(f"Unknown permission for '{role}': {raw_perm!r}")
            perms.add(perm)

        table[role] = frozenset(perms)

    validate_role_permissions(table)
    return MappingProxyType(table)


def load_role_permissions(path: Optional[str] = None) -> RolePermissionTable:
    """
    Build the table from the defaults, overlaid with the JSON file at
    `path` (or ROLE_PERMISSIONS_FILE) when one is configured.
    """
    raw = {role: list(perms) for role, perms in DEFAULT_ROLE_PERMISSIONS.items()}

    path = path or settings.ROLE_PERMISSIONS_FILE
    if path:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                overrides = json.load(fh)
        except (OSError, ValueError) as e:
            raise CatalogError(f"Cannot read permission table {path}: {e}")

        if not isinstance(overrides, dict):
            raise CatalogError(f"Permission table {path} must be a JSON object")

        for raw_role, raw_perms in overrides.items():
            raw[Role.parse(raw_role) or raw_role] = raw_perms
        logger.info(f"Loaded role permission overrides from {path}")

    return build_role_permissions(raw)


ROLE_PERMISSIONS: RolePermissionTable = load_role_permissions()


def reload_role_permissions(path: Optional[str] = None) -> RolePermissionTable:
    """
    Rebuild the table and swap it in with one assignment.
    On any validation error the current table stays in place.
    """
    global ROLE_PERMISSIONS

    ROLE_PERMISSIONS = load_role_permissions(path)
    logger.info("Role permission table reloaded")
    return ROLE_PERMISSIONS


# -----------------------------------------------------
# Lookup
# -----------------------------------------------------
def permissions_for_role(role) -> FrozenSet[Permission]:
    """
    Canonical permission set for a role. Never empty.
    Raises UnknownRoleError for anything outside the closed role set.
    """
    parsed = Role.parse(role)
    if parsed is None:
        raise UnknownRoleError(f"Unknown role: {role!r}")

    return ROLE_PERMISSIONS[parsed]
