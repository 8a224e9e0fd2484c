"""End-to-end tests for the click CLI against a temporary data directory."""

import json
import logging

import pytest
import structlog
from click.testing import CliRunner

from pharmstock.infrastructure.cli.main import cli


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging.getLogger().handlers = []
    structlog.reset_defaults()


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()
    env = {
        "PHARMSTOCK_DATA_DIR": str(tmp_path),
        "PHARMSTOCK_ACTOR_ID": "u-1",
        "PHARMSTOCK_ACTOR_NAME": "Asha",
        "PHARMSTOCK_LOG_LEVEL": "CRITICAL",
    }

    def invoke(*args, **extra_env):
        return runner.invoke(cli, list(args), env={**env, **extra_env})

    invoke.data_dir = tmp_path
    return invoke


def _seed(run):
    result = run("product", "add", "--name", "Paracetamol 500mg", "--price", "1.50", "--stock", "12")
    assert result.exit_code == 0, result.output
    result = run("product", "add", "--name", "Cough syrup", "--price", "4.25", "--stock", "3",
                 "--min-stock", "2", "--expiry", "2099-01-01")
    assert result.exit_code == 0, result.output


class TestProductAndStockCommands:

    def test_product_list(self, run):
        _seed(run)
        result = run("product", "list")
        assert result.exit_code == 0
        assert "Paracetamol 500mg" in result.output
        assert "2099-01-01" in result.output

    def test_apply_and_history(self, run):
        _seed(run)
        result = run("stock", "apply", "--product-id", "1", "--type", "out",
                     "--quantity", "5", "--reason", "Counter sale")
        assert result.exit_code == 0, result.output
        assert "(12 -> 7)" in result.output

        history = run("stock", "history", "--product-id", "1")
        assert "Counter sale" in history.output
        assert "Asha" in history.output

    def test_apply_requires_actor(self, run):
        _seed(run)
        result = run("stock", "apply", "--product-id", "1", "--type", "in",
                     "--quantity", "5", "--reason", "Delivery", PHARMSTOCK_ACTOR_ID="")
        assert result.exit_code != 0
        assert "User not authenticated" in result.output

    def test_apply_unknown_product(self, run):
        _seed(run)
        result = run("stock", "apply", "--product-id", "99", "--type", "in",
                     "--quantity", "5", "--reason", "Delivery")
        assert result.exit_code != 0
        assert "not found" in result.output

    def test_reconcile(self, run):
        _seed(run)
        run("stock", "apply", "--product-id", "1", "--type", "adjustment",
            "--quantity", "40", "--reason", "Stock count")
        result = run("stock", "reconcile", "--product-id", "1")
        assert result.exit_code == 0, result.output
        assert "Ledger is consistent." in result.output

    def test_bad_configuration(self, run):
        result = run("product", "list", PHARMSTOCK_MAX_COMMIT_ATTEMPTS="zero")
        assert result.exit_code != 0
        assert "must be an integer" in result.output


class TestInventoryCommands:

    def test_stats_and_reports(self, run):
        _seed(run)
        run("stock", "apply", "--product-id", "2", "--type", "damaged",
            "--quantity", "3", "--reason", "Broken bottles")

        stats = run("inventory", "stats")
        assert "Products:        2" in stats.output
        assert "Out of stock:    1" in stats.output
        assert "Cough syrup" in run("inventory", "out").output
        assert "No products found." in run("inventory", "low").output


class TestOrderCommands:

    def test_deliver_then_cancel(self, run):
        _seed(run)
        created = run("order", "create", "--customer", "Meera",
                      "--items", "Paracetamol 500mg:4,Cough syrup:1")
        assert created.exit_code == 0, created.output
        assert "Order #1 created" in created.output

        delivered = run("order", "deliver", "--id", "1")
        assert delivered.exit_code == 0, delivered.output
        assert "Stock reduced for all items." in delivered.output

        products = {p["id"]: p for p in json.loads((run.data_dir / "products.json").read_text())}
        assert products["1"]["stock_quantity"] == 8
        assert products["2"]["stock_quantity"] == 2

        notifications = json.loads((run.data_dir / "notifications.json").read_text())
        assert {n["metadata"]["product_id"] for n in notifications} == {"1", "2"}

        history = run("order", "stock-history", "--id", "1")
        assert "Order delivered: #1" in history.output

        cancelled = run("order", "cancel", "--id", "1")
        assert cancelled.exit_code == 0, cancelled.output
        assert "Order #1 cancelled." in cancelled.output
        products = {p["id"]: p for p in json.loads((run.data_dir / "products.json").read_text())}
        assert products["1"]["stock_quantity"] == 12

    def test_alerts_list_unread_notifications(self, run):
        _seed(run)
        assert "No unread alerts." in run("inventory", "alerts").output

        run("order", "create", "--customer", "Meera", "--items", "Cough syrup:1")
        run("order", "deliver", "--id", "1")

        result = run("inventory", "alerts")
        assert result.exit_code == 0, result.output
        assert "Cough syrup is running low. Current stock: 2" in result.output

    def test_status_change_without_delivery(self, run):
        _seed(run)
        run("order", "create", "--customer", "Meera", "--items", "Cough syrup:1")
        result = run("order", "status", "--id", "1", "--to", "shipped")
        assert result.exit_code == 0
        assert "Stock reduced" not in result.output

    def test_validate_reports_shortfall(self, run):
        _seed(run)
        run("order", "create", "--customer", "Meera", "--items", "Cough syrup:9")
        result = run("order", "validate", "--id", "1")
        assert result.exit_code != 0
        assert "Required: 9, Available: 3" in result.output

    def test_strict_delivery_refuses_shortfall(self, run):
        _seed(run)
        run("order", "create", "--customer", "Meera", "--items", "Cough syrup:9")
        result = run("order", "deliver", "--id", "1", PHARMSTOCK_STRICT_DELIVERY="true")
        assert result.exit_code != 0
        assert "Insufficient stock" in result.output

    def test_bad_items_format(self, run):
        result = run("order", "create", "--customer", "Meera", "--items", "Cough syrup")
        assert result.exit_code != 0
        assert "Expected 'ProductName:Quantity'" in result.output
