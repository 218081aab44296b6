import enum


class RoleName(str, enum.Enum):
    admin = "Admin"
    employee = "Employee"
    team_manager = "Team Manager"


class PermissionLevel(str, enum.Enum):
    sales = "Sales"
    orders = "Orders"
    sales_and_orders = "Sales & Orders"
    all_permissions = "All Permissions"


class TransactionKind(str, enum.Enum):
    sales = "sales"
    order = "order"


class RecipientKind(str, enum.Enum):
    account = "account"
    team = "team"
