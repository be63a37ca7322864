"""
Entity services for the Circulation Desk.

- MemberService: members and their standing (members.py)
- ItemService: catalogue items and their availability (items.py)
- LoanService: checkout, return and overdue tracking across both (loans.py)
"""

from .items import ItemService
from .loans import DEFAULT_LOAN_DAYS, LoanService
from .members import MemberService

__all__ = [
    "DEFAULT_LOAN_DAYS",
    "ItemService",
    "LoanService",
    "MemberService",
]
