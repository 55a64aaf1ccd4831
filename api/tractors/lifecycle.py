# api/tractors/lifecycle.py
"""
Status / operator reconciliation for tractor updates.

Every update goes through resolve_status_and_operator() so that the stored
pair is always consistent:

- a tractor with no operator cannot stay Active (it drops to Spare);
- assigning an operator drives the tractor to Active;
- Spare / In Shop / Retired tractors carry no operator.

Contradictory input is normalized silently, never rejected.
"""
from db_models.tractor import TractorStatus, TERMINAL_STATUSES

ACTIVE = TractorStatus.ACTIVE.value
SPARE = TractorStatus.SPARE.value

# Values that mean "nobody assigned" for the Active -> Spare rule
UNASSIGNED_OPERATORS = (None, "", "0")


def resolve_status_and_operator(current: dict, requested: dict) -> tuple[str, str | None]:
    """
    Combine the stored record with a requested patch into one consistent
    ``(status, assigned_operator)`` pair.

    ``requested`` holds only the keys the caller sent. A missing key keeps the
    current value; an explicit ``None`` operator clears the assignment.

    The rules run in a fixed order and the order matters. The sentinel
    operator ``"0"`` counts as unassigned for the first rule but as assigned
    (it is a non-empty string) for the second, so a request carrying ``"0"``
    ends up Active with operator ``"0"``. That outcome is kept as is.

    Likewise, asking for In Shop while leaving the current operator in place
    is overridden by the second rule: the tractor stays Active.
    """
    status = requested.get("status") or current.get("status")
    if "assigned_operator" in requested:
        operator = requested["assigned_operator"]
    else:
        operator = current.get("assigned_operator")
    if operator == "":
        operator = None

    if operator in UNASSIGNED_OPERATORS and status == ACTIVE:
        status = SPARE
    if operator and status != ACTIVE:
        status = ACTIVE
    if status in TERMINAL_STATUSES and operator:
        operator = None

    return status, operator
