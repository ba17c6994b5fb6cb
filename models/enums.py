from enum import Enum
from typing import Optional


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]

    @classmethod
    def parse(cls, value) -> Optional["BaseStrEnum"]:
        """Return the member for a raw literal, or None if it is not one."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Job-function tag assigned to a user. Closed set."""

    global_admin = "global_admin"
    store_admin = "store_admin"
    sales_executive = "sales_executive"
    procurement_admin = "procurement_admin"
    procurement_executive = "procurement_executive"


# -----------------------------------------------------
# PERMISSION
# -----------------------------------------------------
class Permission(BaseStrEnum):
    """Named capability gating a view or an action."""

    # Wildcard: every permission, present and future
    all = "all"

    # Analytics & dashboard
    view_analytics = "view_analytics"
    view_basic_analytics = "view_basic_analytics"
    view_dashboard = "view_dashboard"
    view_reports = "view_reports"
    manage_store_analytics = "manage_store_analytics"
    export_data = "export_data"

    # Users
    manage_store_users = "manage_store_users"
    view_users = "view_users"
    create_users = "create_users"
    edit_users = "edit_users"
    delete_users = "delete_users"

    # Stores
    manage_store = "manage_store"
    view_stores = "view_stores"
    create_stores = "create_stores"
    edit_stores = "edit_stores"
    delete_stores = "delete_stores"

    # Inventory
    view_inventory = "view_inventory"
    manage_inventory = "manage_inventory"
    match_engine = "match_engine"

    # Leads & sales
    view_leads = "view_leads"
    manage_leads = "manage_leads"
    create_leads = "create_leads"
    edit_leads = "edit_leads"
    delete_leads = "delete_leads"
    generate_leads = "generate_leads"
    update_lead_status = "update_lead_status"
    schedule_followups = "schedule_followups"
    send_messages = "send_messages"
    create_sales = "create_sales"
    approve_sales = "approve_sales"
    manage_test_rides = "manage_test_rides"

    # Procurement administration
    manage_procurement = "manage_procurement"
    view_procurement = "view_procurement"
    create_procurement = "create_procurement"
    edit_procurement = "edit_procurement"
    delete_procurement = "delete_procurement"
    manage_city_inventory = "manage_city_inventory"
    view_city_inventory = "view_city_inventory"
    create_procurement_users = "create_procurement_users"
    manage_procurement_users = "manage_procurement_users"
    approve_vehicle_acquisition = "approve_vehicle_acquisition"
    assign_inventory_to_stores = "assign_inventory_to_stores"
    view_procurement_analytics = "view_procurement_analytics"
    manage_vehicle_verification = "manage_vehicle_verification"
    set_procurement_targets = "set_procurement_targets"
    approve_procurement_expenses = "approve_procurement_expenses"
    manage_vendor_relationships = "manage_vendor_relationships"
    review_vehicle_assessments = "review_vehicle_assessments"
    export_procurement_data = "export_procurement_data"

    # Procurement field work
    hunt_vehicles = "hunt_vehicles"
    verify_vehicles = "verify_vehicles"
    photograph_vehicles = "photograph_vehicles"
    score_vehicles = "score_vehicles"
    submit_vehicle_reports = "submit_vehicle_reports"
    record_payment_proof = "record_payment_proof"
    update_vehicle_status = "update_vehicle_status"
    view_assigned_vehicles = "view_assigned_vehicles"
    manage_vehicle_documents = "manage_vehicle_documents"
    track_vehicle_acquisition = "track_vehicle_acquisition"
    communicate_with_vendors = "communicate_with_vendors"
    submit_expense_claims = "submit_expense_claims"

    # Administration
    admin_panel = "admin_panel"
    system_settings = "system_settings"


# -----------------------------------------------------
# SESSION LIFECYCLE STATE
# -----------------------------------------------------
class SessionState(BaseStrEnum):
    """Lifecycle state of the session store."""

    uninitialized = "uninitialized"
    initializing = "initializing"
    authenticated = "authenticated"
    anonymous = "anonymous"
    terminated = "terminated"


# -----------------------------------------------------
# STORE STATUS
# -----------------------------------------------------
class StoreStatus(BaseStrEnum):
    active = "active"
    inactive = "inactive"
