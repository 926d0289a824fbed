"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all() runs
  2. String relationship targets ("Bank", "CreditScore") resolve
"""

from app.models.credential import Credential  # noqa: F401
from app.models.bank import Bank  # noqa: F401
from app.models.profile import Profile, UserType  # noqa: F401
from app.models.credit_score import CreditScore, RiskLevel  # noqa: F401
from app.models.loan_application import LoanApplication, LoanStatus  # noqa: F401
