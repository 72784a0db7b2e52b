"""End-to-end tests for the fincore command line."""

import re

from fincore.cli.main import cli


def run(cli_runner, temp_db, *args):
    return cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "--company", "acme", *args]
    )


def _created_id(output):
    match = re.search(r"ID: ([0-9a-f-]+)\)", output)
    assert match is not None, output
    return match.group(1)


def test_period_week(cli_runner, temp_db):
    """Test the period command resolves a Sunday-first week."""
    result = run(cli_runner, temp_db, "period", "-g", "week", "--date", "2024-03-13")
    assert result.exit_code == 0
    assert "Period: 2024-03-10 – 2024-03-16" in result.output
    assert "Days:   7" in result.output
    assert "Previous: 2024-03-03 – 2024-03-09" in result.output


def test_period_offset_and_all(cli_runner, temp_db):
    """Test --offset and the all-time period."""
    result = run(cli_runner, temp_db, "period", "-g", "semester", "--date", "2024-08-01", "--offset", "-1")
    assert result.exit_code == 0
    assert "Period: 1st half of 2024" in result.output
    assert "To:     2024-06-30" in result.output

    result = run(cli_runner, temp_db, "period", "-g", "all")
    assert result.exit_code == 0
    assert "From:   1900-01-01" in result.output
    assert "Previous" not in result.output


def test_period_invalid_date(cli_runner, temp_db):
    """Test an unparseable --date fails with an error."""
    result = run(cli_runner, temp_db, "period", "--date", "not-a-date")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_category_commands(cli_runner, temp_db):
    """Test adding, listing and deleting categories."""
    result = run(cli_runner, temp_db, "category", "list")
    assert "No categories found." in result.output

    result = run(cli_runner, temp_db, "category", "add", "Sales", "--kind", "income")
    assert result.exit_code == 0
    assert "Created category 'Sales'" in result.output

    result = run(cli_runner, temp_db, "category", "add", "Sales", "--kind", "income")
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = run(cli_runner, temp_db, "category", "list", "--kind", "income")
    assert "Sales" in result.output

    result = run(cli_runner, temp_db, "category", "delete", "Sales", "--yes")
    assert result.exit_code == 0
    assert "Deleted category 'Sales'" in result.output

    result = run(cli_runner, temp_db, "category", "delete", "Sales", "--yes")
    assert result.exit_code == 1


def test_account_and_cost_center_commands(cli_runner, temp_db):
    """Test accounts and cost centers."""
    result = run(cli_runner, temp_db, "account", "add", "Checking", "--balance", "1,500.00", "--bank", "First Bank")
    assert result.exit_code == 0
    assert "Created account 'Checking'" in result.output

    result = run(cli_runner, temp_db, "account", "list")
    assert "Checking" in result.output
    assert "1,500.00" in result.output

    result = run(cli_runner, temp_db, "cost-center", "add", "ADM", "Administration")
    assert result.exit_code == 0
    result = run(cli_runner, temp_db, "cost-center", "list")
    assert "ADM" in result.output


def test_template_commands(cli_runner, temp_db):
    """Test building a template line by line and checking it."""
    run(cli_runner, temp_db, "category", "add", "Sales", "--kind", "income")
    run(cli_runner, temp_db, "category", "add", "Taxes on Sales", "--kind", "expense")

    result = run(cli_runner, temp_db, "template", "create", "Income statement", "--default")
    assert result.exit_code == 0
    template_id = _created_id(result.output)

    result = run(
        cli_runner, temp_db, "template", "add-line", template_id, "revenue", "Revenue",
        "--type", "revenue", "--category", "Sales",
    )
    assert result.exit_code == 0
    assert "Added line 'revenue' (REVENUE)" in result.output

    run(
        cli_runner, temp_db, "template", "add-line", template_id, "deductions", "Deductions",
        "--type", "deduction", "--category", "Taxes on Sales",
    )
    result = run(
        cli_runner, temp_db, "template", "add-line", template_id, "net_revenue", "Net revenue",
        "--type", "subtotal", "--formula", "revenue - deductions",
    )
    assert result.exit_code == 0

    result = run(
        cli_runner, temp_db, "template", "add-line", template_id, "broken", "Broken",
        "--type", "result",
    )
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = run(cli_runner, temp_db, "template", "list")
    assert "Income statement (default)" in result.output

    result = run(cli_runner, temp_db, "template", "show")
    assert result.exit_code == 0
    assert "revenue - deductions" in result.output
    assert "Template is valid." in result.output


def test_transaction_with_installments(cli_runner, temp_db, sample_categories):
    """Test splitting a transaction into installments and paying one."""
    result = run(
        cli_runner, temp_db, "transaction", "add", "100", "--kind", "expense",
        "--category", "Rent", "--date", "2024-01-31", "--installments", "3",
    )
    assert result.exit_code == 0
    assert "1/3  2024-01-31" in result.output
    assert "33.34" in result.output
    assert "3/3  2024-03-31" in result.output
    transaction_id = result.output.split("Created transaction ")[1].split()[0]

    result = run(cli_runner, temp_db, "transaction", "show", transaction_id)
    assert result.exit_code == 0
    assert "Status: PENDING" in result.output
    payment_id = re.search(r"^\s+([0-9a-f]{32})\s+1/3", result.output, re.MULTILINE).group(1)

    result = run(cli_runner, temp_db, "transaction", "pay", transaction_id, payment_id, "--date", "2024-02-01")
    assert result.exit_code == 0
    assert "transaction is now PARTIAL" in result.output

    result = run(
        cli_runner, temp_db, "transaction", "list", "--date", "2024-01-15", "--status", "pending"
    )
    assert "No transactions found." in result.output

    result = run(
        cli_runner, temp_db, "transaction", "list", "--date", "2024-01-15", "--status", "partial"
    )
    assert "Found 1 transaction(s):" in result.output


def test_transaction_add_rejects_bad_input(cli_runner, temp_db, sample_categories):
    """Test invalid transaction options fail with exit code 1."""
    result = run(cli_runner, temp_db, "transaction", "add", "abc", "--kind", "income")
    assert result.exit_code == 1
    assert "Invalid amount" in result.output

    result = run(
        cli_runner, temp_db, "transaction", "add", "10", "--kind", "income", "--installments", "0"
    )
    assert result.exit_code == 1

    result = run(
        cli_runner, temp_db, "transaction", "add", "10", "--kind", "income",
        "--paid", "--installments", "2",
    )
    assert result.exit_code == 1

    result = run(
        cli_runner, temp_db, "transaction", "add", "10", "--kind", "income", "--category", "Nope"
    )
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_transaction_list_and_delete(cli_runner, temp_db, sample_categories):
    """Test listing a month and deleting a transaction."""
    result = run(
        cli_runner, temp_db, "transaction", "add", "250.00", "--kind", "income",
        "--category", "Sales", "--date", "2024-01-10", "--description", "Invoice 42", "--paid",
    )
    transaction_id = result.output.split("Created transaction ")[1].split()[0]
    run(
        cli_runner, temp_db, "transaction", "add", "80.00", "--kind", "expense",
        "--category", "Rent", "--date", "2024-01-12", "--paid",
    )

    result = run(cli_runner, temp_db, "transaction", "list", "--date", "2024-01-01")
    assert "January 2024" in result.output
    assert "Found 2 transaction(s):" in result.output
    assert "Income: 250.00 | Expenses: 80.00 | Count: 2" in result.output

    result = run(cli_runner, temp_db, "transaction", "list", "--date", "2024-01-01", "--text", "invoice")
    assert "Found 1 transaction(s):" in result.output

    result = run(cli_runner, temp_db, "transaction", "delete", transaction_id, "--yes")
    assert result.exit_code == 0
    assert f"Deleted transaction {transaction_id}" in result.output

    result = run(cli_runner, temp_db, "transaction", "list", "--date", "2024-02-01")
    assert "No transactions found." in result.output


def test_paid_transaction_moves_account_balance(cli_runner, temp_db, sample_categories):
    """Test the account balance follows paid payments."""
    run(cli_runner, temp_db, "account", "add", "Checking", "--balance", "100")
    run(
        cli_runner, temp_db, "transaction", "add", "40", "--kind", "expense",
        "--category", "Rent", "--account", "Checking", "--paid",
    )

    result = run(cli_runner, temp_db, "account", "list")
    assert "60.00" in result.output


def test_report_statement(cli_runner, temp_db, sample_template):
    """Test the statement report with the percent column."""
    for args in (
        ("200.00", "--kind", "income", "--category", "Sales"),
        ("50.00", "--kind", "expense", "--category", "Taxes on Sales"),
        ("30.00", "--kind", "expense", "--category", "Rent"),
    ):
        run(cli_runner, temp_db, "transaction", "add", *args, "--date", "2024-01-15", "--paid")

    result = run(cli_runner, temp_db, "report", "statement", "--date", "2024-01-01", "--percent")
    assert result.exit_code == 0
    assert "Income statement - January 2024" in result.output
    assert "NET REVENUE" in result.output
    assert "75.00%" in result.output
    assert "FINAL RESULT" in result.output
    assert "120.00" in result.output
    assert "Transactions: 3" in result.output

    result = run(cli_runner, temp_db, "report", "statement", "--date", "2023-01-01", "--percent")
    assert result.exit_code == 0
    assert "N/A" in result.output


def test_report_statement_without_template(cli_runner, temp_db):
    """Test the statement report fails without a template."""
    result = run(cli_runner, temp_db, "report", "statement")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_report_cash_flow(cli_runner, temp_db, sample_categories):
    """Test the cash flow report over a month."""
    run(cli_runner, temp_db, "transaction", "add", "100", "--kind", "income", "--category", "Sales", "--date", "2024-01-01", "--paid")
    run(cli_runner, temp_db, "transaction", "add", "30", "--kind", "expense", "--category", "Rent", "--date", "2024-01-20", "--paid")

    result = run(cli_runner, temp_db, "report", "cash-flow", "--date", "2024-01-05")
    assert result.exit_code == 0
    assert "Cash flow - January 2024" in result.output
    assert "2024-01-01" in result.output
    assert "2024-01-20" in result.output
    assert "2024-01-02" not in result.output
    assert re.search(r"Total\s+70\.00", result.output)

    result = run(cli_runner, temp_db, "report", "cash-flow", "-g", "all")
    assert "2024-01" in result.output
