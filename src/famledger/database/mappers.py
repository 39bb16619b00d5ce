"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic, including the string-to-enum
translation for columns stored as plain text.
"""

from famledger.domain import entities as domain
from famledger.database.models import (
    Account as ORMAccount,
    BillReminder as ORMBillReminder,
    Budget as ORMBudget,
    Category as ORMCategory,
    Goal as ORMGoal,
    Household as ORMHousehold,
    HouseholdMember as ORMHouseholdMember,
    Loan as ORMLoan,
    LoanPayment as ORMLoanPayment,
    RecurringTransaction as ORMRecurringTransaction,
    Transaction as ORMTransaction,
)


def household_to_domain(orm_household: ORMHousehold) -> domain.Household:
    """Convert SQLAlchemy Household model to domain Household entity."""
    return domain.Household(
        id=orm_household.id,
        name=orm_household.name,
        created_by=orm_household.created_by,
        created_at=orm_household.created_at,
    )


def household_member_to_domain(orm_member: ORMHouseholdMember) -> domain.HouseholdMember:
    """Convert SQLAlchemy HouseholdMember model to domain entity."""
    return domain.HouseholdMember(
        id=orm_member.id,
        household_id=orm_member.household_id,
        user_id=orm_member.user_id,
        role=domain.HouseholdRole(orm_member.role),
        joined_at=orm_member.joined_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        household_id=orm_account.household_id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        currency=orm_account.currency,
        opening_balance=orm_account.opening_balance,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        category_type=domain.CategoryType(orm_category.category_type),
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        household_id=orm_transaction.household_id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        amount=orm_transaction.amount,
        date=orm_transaction.date,
        description=orm_transaction.description,
        notes=orm_transaction.notes,
        recurring_transaction_id=orm_transaction.recurring_transaction_id,
        created_at=orm_transaction.created_at,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        user_id=orm_budget.user_id,
        household_id=orm_budget.household_id,
        name=orm_budget.name,
        category_id=orm_budget.category_id,
        amount=orm_budget.amount,
        period=domain.BudgetPeriod(orm_budget.period),
        start_date=orm_budget.start_date,
        end_date=orm_budget.end_date,
        is_active=orm_budget.is_active,
    )


def goal_to_domain(orm_goal: ORMGoal) -> domain.Goal:
    """Convert SQLAlchemy Goal model to domain Goal entity."""
    return domain.Goal(
        id=orm_goal.id,
        user_id=orm_goal.user_id,
        household_id=orm_goal.household_id,
        name=orm_goal.name,
        description=orm_goal.description,
        target_amount=orm_goal.target_amount,
        current_amount=orm_goal.current_amount,
        target_date=orm_goal.target_date,
        is_active=orm_goal.is_active,
        version=orm_goal.version,
    )


def loan_to_domain(orm_loan: ORMLoan) -> domain.Loan:
    """Convert SQLAlchemy Loan model to domain Loan entity."""
    return domain.Loan(
        id=orm_loan.id,
        user_id=orm_loan.user_id,
        household_id=orm_loan.household_id,
        name=orm_loan.name,
        loan_type=orm_loan.loan_type,
        principal_amount=orm_loan.principal_amount,
        interest_rate=orm_loan.interest_rate,
        tenure_months=orm_loan.tenure_months,
        emi_amount=orm_loan.emi_amount,
        remaining_balance=orm_loan.remaining_balance,
        start_date=orm_loan.start_date,
        next_due_date=orm_loan.next_due_date,
        is_active=orm_loan.is_active,
        version=orm_loan.version,
        created_at=orm_loan.created_at,
        updated_at=orm_loan.updated_at,
    )


def loan_payment_to_domain(orm_payment: ORMLoanPayment) -> domain.LoanPayment:
    """Convert SQLAlchemy LoanPayment model to domain LoanPayment entity."""
    return domain.LoanPayment(
        id=orm_payment.id,
        loan_id=orm_payment.loan_id,
        user_id=orm_payment.user_id,
        household_id=orm_payment.household_id,
        amount=orm_payment.amount,
        principal_component=orm_payment.principal_component,
        interest_component=orm_payment.interest_component,
        payment_date=orm_payment.payment_date,
        status=orm_payment.status,
        created_at=orm_payment.created_at,
    )


def recurring_transaction_to_domain(
    orm_recurring: ORMRecurringTransaction,
) -> domain.RecurringTransaction:
    """Convert SQLAlchemy RecurringTransaction model to domain entity."""
    return domain.RecurringTransaction(
        id=orm_recurring.id,
        user_id=orm_recurring.user_id,
        household_id=orm_recurring.household_id,
        account_id=orm_recurring.account_id,
        category_id=orm_recurring.category_id,
        description=orm_recurring.description,
        amount=orm_recurring.amount,
        transaction_type=domain.TransactionType(orm_recurring.transaction_type),
        schedule=domain.RecurringSchedule(
            frequency=domain.Frequency(orm_recurring.frequency),
            start_date=orm_recurring.start_date,
            end_date=orm_recurring.end_date,
            next_execution_date=orm_recurring.next_execution_date,
            is_active=orm_recurring.is_active,
        ),
        version=orm_recurring.version,
        created_at=orm_recurring.created_at,
    )


def bill_reminder_to_domain(orm_bill: ORMBillReminder) -> domain.BillReminder:
    """Convert SQLAlchemy BillReminder model to domain BillReminder entity."""
    frequency = None
    if orm_bill.recurring_frequency is not None:
        frequency = domain.Frequency(orm_bill.recurring_frequency)
    return domain.BillReminder(
        id=orm_bill.id,
        user_id=orm_bill.user_id,
        household_id=orm_bill.household_id,
        title=orm_bill.title,
        description=orm_bill.description,
        amount=orm_bill.amount,
        due_date=orm_bill.due_date,
        reminder_days_before=orm_bill.reminder_days_before,
        is_recurring=orm_bill.is_recurring,
        recurring_frequency=frequency,
        category_id=orm_bill.category_id,
        is_completed=orm_bill.is_completed,
        version=orm_bill.version,
    )
