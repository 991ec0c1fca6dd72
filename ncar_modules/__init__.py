"""
NCAR Modules.

Thin orchestration layers over the NCAR kernel, engines and services.
Each module contains:
- Command models (the forms collaborators submit)
- Workflows (role-gated state machines)
- A service facade (the only writer of its stores)

Modules:
- findings: NCARs and their corrective-action plans
- audit_plans: audit scheduling envelopes
"""
