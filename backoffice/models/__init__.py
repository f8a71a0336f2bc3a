from .company import Company, Employee
from .schedule import Shift
from .ccss import CcssRate
from .payroll import PayrollRecord

__all__ = ["Company", "Employee", "Shift", "CcssRate", "PayrollRecord"]
