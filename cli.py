import json
import logging
from functools import wraps

import click

from config.constants import ApplicationMethod, InstallmentFrequency, PlanType
from config.settings import LOG_FORMAT
from core.calculator import calculate_loan
from core.exceptions import LendingEngineError
from core.schedule import extend_to_minimum_term
from loan_data.schema import FeeDefinition, LateFeeTier, LoanPlan, LoanRequest
from utils.date_utils import next_salary_date, parse_date, salary_date_for_month_offset


def _engine_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LendingEngineError as exc:
            raise click.ClickException(str(exc))
    return wrapper


def _parse_fee(value: str) -> FeeDefinition:
    try:
        name, percent, method = value.split(":")
    except ValueError:
        raise click.BadParameter(f"expected NAME:PERCENT:METHOD, got {value!r}")
    return FeeDefinition(name=name, percent=percent, application_method=method)


def _parse_tier(order: int, value: str) -> LateFeeTier:
    try:
        start, end, percent = value.split(":")
        start, end = int(start), int(end) if end else None
    except ValueError:
        raise click.BadParameter(f"expected START:END:PERCENT, got {value!r}")
    return LateFeeTier(
        days_overdue_start=start,
        days_overdue_end=end,
        penalty_percent=percent,
        tier_order=order,
    )


@click.group()
@click.option('--verbose', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """Loan repayment calculator."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


@cli.command()
@click.option('--principal', type=str, required=True, help='Loan principal')
@click.option('--plan-type', type=click.Choice([e.value for e in PlanType]), default=PlanType.SINGLE.value, help='Plan type')
@click.option('--repayment-days', type=int, default=None, help='Single plan term / minimum first-installment term')
@click.option('--frequency', type=click.Choice([e.value for e in InstallmentFrequency]), default=None, help='Installment frequency')
@click.option('--installments', type=int, default=None, help='Number of installments')
@click.option('--daily-rate', type=str, required=True, help='Daily interest rate as a fraction (0.001 = 0.1%/day)')
@click.option('--align-salary/--no-align-salary', default=False, help='Align due dates to salary day')
@click.option('--salary-day', type=int, default=None, help='Borrower salary day of month (1-31)')
@click.option('--fee', 'fees', multiple=True,
              help=f"Fee as NAME:PERCENT:METHOD, METHOD one of {', '.join(e.value for e in ApplicationMethod)}")
@click.option('--late-tier', 'late_tiers', multiple=True, help='Late fee tier as START:END:PERCENT (empty END = open-ended)')
@click.option('--today', type=str, default=None, help='Calculation date (YYYY-MM-DD)')
@click.option('--custom-days', type=int, default=None, help='Override interest days')
@click.option('--output', type=click.Choice(['json', 'csv']), default='json', help='json result or csv installment schedule')
@_engine_errors
def quote(principal, plan_type, repayment_days, frequency, installments, daily_rate,
          align_salary, salary_day, fees, late_tiers, today, custom_days, output):
    """Calculates disbursal, interest, total repayable and schedule for a loan."""
    plan = LoanPlan(
        plan_id="cli",
        plan_type=plan_type,
        daily_interest_rate=daily_rate,
        repayment_days=repayment_days,
        installment_frequency=frequency,
        installment_count=installments,
        align_to_salary_date=align_salary,
        late_fee_tiers=[_parse_tier(i + 1, t) for i, t in enumerate(late_tiers)],
    )
    request = LoanRequest(
        principal=principal,
        plan=plan,
        fees=[_parse_fee(f) for f in fees],
        salary_day_of_month=salary_day,
    )
    result = calculate_loan(request, today=today, custom_days=custom_days)
    if output == 'csv':
        click.echo(result.schedule_frame().to_csv(index=False))
    else:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@cli.command('salary-date')
@click.option('--from-date', type=str, required=True, help='Reference date (YYYY-MM-DD)')
@click.option('--salary-day', type=int, required=True, help='Salary day of month (1-31)')
@click.option('--months', type=int, default=1, help='Number of consecutive salary dates to list')
@click.option('--minimum-days', type=int, default=0, help='Roll the first date forward until at least this many days away')
@_engine_errors
def salary_date(from_date, salary_day, months, minimum_days):
    """Lists the next salary dates after a reference date."""
    start = parse_date(from_date)
    first = extend_to_minimum_term(
        start, next_salary_date(start, salary_day), salary_day, minimum_days,
    )
    for offset in range(months):
        click.echo(salary_date_for_month_offset(first, salary_day, offset).isoformat())


if __name__ == '__main__':
    cli()
