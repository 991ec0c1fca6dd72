"""
Findings Module (``ncar_modules.findings``).

Responsibility
--------------
The NCAR corrective-action lifecycle: raising findings, auditee action
plans, lead-auditor approval and rejection.

Failure modes
-------------
* ``ValidationError`` for empty required fields or blank remarks.
* Illegal moves are no-ops unless the executor runs in strict mode.
"""

from ncar_modules.findings.models import ActionPlanFields, FindingFields
from ncar_modules.findings.service import FindingService
from ncar_modules.findings.workflows import FINDING_WORKFLOW

__all__ = [
    "ActionPlanFields",
    "FINDING_WORKFLOW",
    "FindingFields",
    "FindingService",
]
