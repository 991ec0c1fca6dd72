"""
Typed Exception Hierarchy for the NCAR Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the lifecycle core (screens, importers, test suites) must tell a
missing-field error apart from a forbidden transition without parsing
message strings.  Every error therefore:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable)
  3. Carries structured DATA as attributes

Example:
    try:
        service.reject_finding(finding_id, remarks, Role.LEAD_AUDITOR)
    except ValidationError as e:
        show_form_error(e.code, e.missing_fields)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    NcarError (base)
    |
    +-- ValidationError
    |
    +-- LookupFailure
    |   +-- FindingNotFoundError
    |   +-- ActionPlanNotFoundError
    |   +-- AuditPlanNotFoundError
    |
    +-- TransitionError
    |   +-- PermissionDeniedError
    |   +-- InvalidTransitionError
    |
    +-- DirectoryError
        +-- ReportingCycleError
        +-- DuplicateUserError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                   | When Raised
------------|------------------------|------------------------------------------
Validation  | VALIDATION_FAILED      | Required field empty, blank remarks
------------|------------------------|------------------------------------------
Lookup      | FINDING_NOT_FOUND      | Finding ID doesn't exist
            | ACTION_PLAN_NOT_FOUND  | Action plan ID doesn't exist
            | AUDIT_PLAN_NOT_FOUND   | Audit plan ID doesn't exist
------------|------------------------|------------------------------------------
Transition  | PERMISSION_DENIED      | Role may not fire transition (strict mode)
            | INVALID_TRANSITION     | No transition from state (strict mode)
------------|------------------------|------------------------------------------
Directory   | REPORTING_CYCLE        | reports_to graph contains a cycle
            | DUPLICATE_USER         | Two users share an id

Transition errors are only raised when a service runs in strict mode.  In
the default lenient mode the same conditions are logged and the command is
a no-op.
"""

from __future__ import annotations


class NcarError(Exception):
    """
    Base exception for all NCAR kernel errors.

    All subclasses have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "NCAR_ERROR"


class ValidationError(NcarError):
    """Command input failed validation.  No store was mutated."""

    code: str = "VALIDATION_FAILED"

    def __init__(
        self,
        entity: str,
        missing_fields: tuple[str, ...] = (),
        reason: str = "",
    ):
        self.entity = entity
        self.missing_fields = tuple(missing_fields)
        self.reason = reason
        if missing_fields:
            message = (
                f"Invalid {entity}: missing required field(s) "
                f"{', '.join(missing_fields)}"
            )
        else:
            message = f"Invalid {entity}: {reason}"
        super().__init__(message)


# Lookup exceptions


class LookupFailure(NcarError):
    """Base exception for unknown record identifiers."""

    code: str = "LOOKUP_FAILED"


class FindingNotFoundError(LookupFailure):
    code: str = "FINDING_NOT_FOUND"

    def __init__(self, finding_id: str):
        self.finding_id = finding_id
        super().__init__(f"Finding not found: {finding_id}")


class ActionPlanNotFoundError(LookupFailure):
    code: str = "ACTION_PLAN_NOT_FOUND"

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Action plan not found: {plan_id}")


class AuditPlanNotFoundError(LookupFailure):
    code: str = "AUDIT_PLAN_NOT_FOUND"

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Audit plan not found: {plan_id}")


# Transition exceptions


class TransitionError(NcarError):
    """Base exception for commands outside the legal state x role matrix."""

    code: str = "TRANSITION_ERROR"


class PermissionDeniedError(TransitionError):
    """The actor's role may not fire this transition."""

    code: str = "PERMISSION_DENIED"

    def __init__(self, workflow: str, action: str, from_state: str, role: str):
        self.workflow = workflow
        self.action = action
        self.from_state = from_state
        self.role = role
        super().__init__(
            f"{workflow}: role {role} may not {action} from {from_state}"
        )


class InvalidTransitionError(TransitionError):
    """No transition exists for the action from the current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, action: str, from_state: str):
        self.workflow = workflow
        self.action = action
        self.from_state = from_state
        super().__init__(f"{workflow}: cannot {action} from {from_state}")


# Directory exceptions


class DirectoryError(NcarError):
    code: str = "DIRECTORY_ERROR"


class ReportingCycleError(DirectoryError):
    """
    The reports_to relation contains a cycle.

    Recursive KPI rollups walk the reporting tree; a cycle would make the
    walk non-terminating, so the directory refuses to load it.
    """

    code: str = "REPORTING_CYCLE"

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Reporting cycle detected: {' -> '.join(cycle)}")


class DuplicateUserError(DirectoryError):
    code: str = "DUPLICATE_USER"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Duplicate user id: {user_id}")
