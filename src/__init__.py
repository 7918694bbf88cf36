"""
FlatMoney - Source Package

Monthly ledger for a short-term-rental flat: revenue, expenses, the
administrator's fee, and the net profit split between partners.

DESIGN PRINCIPLES:
1. Money is Decimal, rounded half-up to cents, only at the edges
2. Fail early, fail visibly (a corrupted ledger stops the app)
3. No silent corrections (adjusted values come back as warnings)
4. Destructive actions need human confirmation
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "FlatMoney Team"
