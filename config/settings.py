from decimal import Decimal, ROUND_HALF_UP

# GST charged on top of every fee
GST_RATE = Decimal("0.18")

# Amount precision: 0 = whole rupees
CURRENCY_PRECISION = 0
CURRENCY_ROUNDING = ROUND_HALF_UP
CURRENCY_SYMBOL = "₹"

# Salary day-of-month bounds
SALARY_DAY_MIN = 1
SALARY_DAY_MAX = 31

# Minimum first-installment term for salary-aligned multi-installment plans
# without repayment_days
DEFAULT_MIN_FIRST_INSTALLMENT_DAYS = 15

# APR = charges / principal / days * 36500
APR_DAYS_BASIS = 36500
APR_PRECISION = 2

# IRR search bracket (annualized, fraction)
IRR_LOWER_BOUND = -0.99
IRR_UPPER_BOUND = 1000.0
IRR_PRECISION = 4

# Loan extension terms
EXTENSION_FEE_PERCENT = Decimal("21")
EXTENSION_FIXED_DAYS = 15
EXTENSION_WINDOW_BEFORE_DAYS = 5
EXTENSION_WINDOW_AFTER_DAYS = 15
MAX_EXTENSIONS = 4

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
