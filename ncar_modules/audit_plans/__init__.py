"""
Audit Plans Module (``ncar_modules.audit_plans``).

Scheduling envelopes for audits, advanced one stage at a time from
DRAFT to CLOSED by the lead auditor.
"""

from ncar_modules.audit_plans.models import AuditPlanFields
from ncar_modules.audit_plans.service import AuditPlanService
from ncar_modules.audit_plans.workflows import AUDIT_PLAN_WORKFLOW

__all__ = ["AUDIT_PLAN_WORKFLOW", "AuditPlanFields", "AuditPlanService"]
