# core/demo_users.py

"""
Demo stores and accounts for the built-in credential verifier.
DEV ONLY: plaintext passwords, never enable in production.
"""

from models.user import StoreRead


DEMO_STORES = [
    StoreRead(
        id="1",
        name="Mumbai Central Store",
        location="Mumbai Central",
        address="123 Dr. D.N. Road, Mumbai Central, Mumbai - 400008",
        phone="+91 22 2123 4567",
        email="mumbai@bikebiz.com",
        city="Mumbai",
        state="Maharashtra",
        manager="Rajesh Patel",
    ),
    StoreRead(
        id="2",
        name="Delhi Karol Bagh Store",
        location="Karol Bagh",
        address="456 Karol Bagh Market, New Delhi - 110005",
        phone="+91 11 2123 4567",
        email="delhi@bikebiz.com",
        city="Delhi",
        state="Delhi",
        manager="Amit Sharma",
    ),
    StoreRead(
        id="3",
        name="Bangalore Koramangala Store",
        location="Koramangala",
        address="789 Koramangala 4th Block, Bangalore - 560034",
        phone="+91 80 2123 4567",
        email="bangalore@bikebiz.com",
        city="Bangalore",
        state="Karnataka",
        manager="Karthik Reddy",
    ),
    StoreRead(
        id="4",
        name="Wakad Store",
        location="Wakad",
        address="101 Wakad Road, Hinjewadi Phase 1, Pune - 411057",
        phone="+91 20 2123 4567",
        email="wakad@bikebiz.com",
        city="Pune",
        state="Maharashtra",
        manager="Suresh Patil",
    ),
]


# Explicit grants are deliberately partial: role defaults fill the rest.
_STORE_ADMIN_GRANTS = [
    "manage_store", "manage_store_users", "manage_leads", "manage_inventory",
    "match_engine", "view_analytics", "create_sales", "view_reports",
    "manage_test_rides",
]
_SALES_GRANTS = [
    "manage_leads", "view_inventory", "match_engine", "create_sales",
    "manage_test_rides", "send_messages", "schedule_followups",
]


DEMO_USERS = [
    {
        "id": "1", "email": "admin@bikebiz.com", "password": "admin123",
        "name": "Global Admin", "role": "global_admin",
        "permissions": ["all"],
    },
    {
        "id": "2", "email": "store@mumbai.com", "password": "store123",
        "name": "Rajesh Patel", "role": "store_admin",
        "permissions": _STORE_ADMIN_GRANTS,
        "store_id": "1", "store_name": "Mumbai Central Store",
        "city": "Mumbai", "department": "Store Management",
    },
    {
        "id": "3", "email": "store@delhi.com", "password": "store123",
        "name": "Amit Sharma", "role": "store_admin",
        "permissions": _STORE_ADMIN_GRANTS,
        "store_id": "2", "store_name": "Delhi Karol Bagh Store",
        "city": "Delhi", "department": "Store Management",
    },
    {
        "id": "4", "email": "store@bangalore.com", "password": "store123",
        "name": "Karthik Reddy", "role": "store_admin",
        "permissions": _STORE_ADMIN_GRANTS,
        "store_id": "3", "store_name": "Bangalore Koramangala Store",
        "city": "Bangalore", "department": "Store Management",
    },
    {
        "id": "5", "email": "sales1@mumbai.com", "password": "sales123",
        "name": "Priya Sharma", "role": "sales_executive",
        "permissions": _SALES_GRANTS,
        "store_id": "1", "store_name": "Mumbai Central Store",
        "city": "Mumbai", "department": "Lead Generation",
    },
    {
        "id": "6", "email": "sales2@mumbai.com", "password": "sales123",
        "name": "Rohit Kumar", "role": "sales_executive",
        "permissions": _SALES_GRANTS,
        "store_id": "1", "store_name": "Mumbai Central Store",
        "city": "Mumbai", "department": "Sales & Fulfillment",
    },
    {
        "id": "7", "email": "sales1@delhi.com", "password": "sales123",
        "name": "Neha Singh", "role": "sales_executive",
        "permissions": _SALES_GRANTS,
        "store_id": "2", "store_name": "Delhi Karol Bagh Store",
        "city": "Delhi", "department": "Lead Generation",
    },
    {
        "id": "8", "email": "admin@wakad.com", "password": "admin123",
        "name": "Suresh Patil", "role": "store_admin",
        "permissions": _STORE_ADMIN_GRANTS,
        "store_id": "4", "store_name": "Wakad Store",
        "city": "Pune", "department": "Store Management",
    },
    {
        "id": "9", "email": "executive@wakad.com", "password": "exec123",
        "name": "Anita Kulkarni", "role": "sales_executive",
        "permissions": _SALES_GRANTS,
        "store_id": "4", "store_name": "Wakad Store",
        "city": "Pune", "department": "Sales Executive",
    },
    {
        "id": "10", "email": "procurement@pune.com", "password": "proc123",
        "name": "Vikram Deshmukh", "role": "procurement_admin",
        "permissions": [],
        "city": "Pune", "managed_city": "Pune",
        "department": "Procurement Administration",
    },
    {
        "id": "11", "email": "procurement@mumbai.com", "password": "proc123",
        "name": "Ravi Mehta", "role": "procurement_admin",
        "permissions": [],
        "city": "Mumbai", "managed_city": "Mumbai",
        "department": "Procurement Administration",
    },
    {
        "id": "12", "email": "exec1@pune-procurement.com", "password": "exec123",
        "name": "Prashant Jadhav", "role": "procurement_executive",
        "permissions": [],
        "city": "Pune", "reporting_to": "10",
        "department": "Vehicle Procurement",
    },
    {
        "id": "13", "email": "exec2@pune-procurement.com", "password": "exec123",
        "name": "Sneha Bhosale", "role": "procurement_executive",
        "permissions": [],
        "city": "Pune", "reporting_to": "10",
        "department": "Vehicle Procurement",
    },
    {
        "id": "14", "email": "exec1@mumbai-procurement.com", "password": "exec123",
        "name": "Arjun Iyer", "role": "procurement_executive",
        "permissions": [],
        "city": "Mumbai", "reporting_to": "11",
        "department": "Vehicle Procurement",
    },
]
