"""
Core Role Configuration - Hardcoded Setup
=========================================

Defines the role strings used as the sole authorization primitive,
the user status values, and the role groups that endpoints share.

This module is the source of truth; models and decorators import from here.
"""

# ============================================================================
# ROLES
# ============================================================================

class Roles:
    """Role identifiers stored on CustomUser.role."""
    JUNIOR = 'junior'
    TEAMLEAD = 'teamlead'
    MANAGER = 'manager'
    HR = 'hr'
    CFO = 'cfo'
    ADMIN = 'admin'
    TESTER = 'tester'
    CEO = 'ceo'
    QA_ASSISTANT = 'qa_assistant'


ROLE_CHOICES = [
    (Roles.JUNIOR, 'Junior'),
    (Roles.TEAMLEAD, 'Team Lead'),
    (Roles.MANAGER, 'Manager'),
    (Roles.HR, 'HR'),
    (Roles.CFO, 'CFO'),
    (Roles.ADMIN, 'Admin'),
    (Roles.TESTER, 'Tester'),
    (Roles.CEO, 'CEO'),
    (Roles.QA_ASSISTANT, 'QA Assistant'),
]

ALL_ROLES = [code for code, _ in ROLE_CHOICES]

# Only admins may create these
PROTECTED_ROLES = [Roles.CEO, Roles.ADMIN]

# Roles HR/admin may switch a user into
ASSIGNABLE_ROLES = [
    Roles.JUNIOR, Roles.TEAMLEAD, Roles.MANAGER, Roles.TESTER,
    Roles.HR, Roles.CFO, Roles.ADMIN,
]


# ============================================================================
# USER STATUS
# ============================================================================

class UserStatus:
    """Account status values stored on CustomUser.status."""
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    TERMINATED = 'terminated'


USER_STATUS_CHOICES = [
    (UserStatus.ACTIVE, 'Active'),
    (UserStatus.INACTIVE, 'Inactive'),
    (UserStatus.TERMINATED, 'Terminated'),
]


# ============================================================================
# ROLE GROUPS
# ============================================================================

# Roles that see everybody's records
MANAGEMENT_ROLES = [Roles.MANAGER, Roles.HR, Roles.CFO, Roles.ADMIN]

# Roles that manage bank and card inventory
FINANCE_ROLES = [Roles.CFO, Roles.ADMIN]

# Roles that may open a card's secrets with the privileged PIN
PRIVILEGED_REVEAL_ROLES = [Roles.CFO, Roles.ADMIN, Roles.MANAGER, Roles.TESTER]
