from .works import (
    works_handler,
    work_detail
)
from .withdrawals import (
    work_withdrawal_create,
    work_withdrawal_detail,
    withdrawals_list,
    withdrawal_detail,
    withdrawal_check,
    withdrawal_hr_comment,
    withdrawal_cfo_comment
)
from .approvals import (
    teamlead_withdrawals,
    teamlead_withdrawal_approve,
    teamlead_withdrawal_reject,
    manager_withdrawals,
    universal_withdrawal_action
)
