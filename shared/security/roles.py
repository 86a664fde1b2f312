import enum


class Role(str, enum.Enum):
    """Authorization tiers carried in the token's ``role`` claim."""

    ADMIN = "Admin"
    EMPLOYEE = "Employee"
