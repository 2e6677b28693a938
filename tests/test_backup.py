"""Tests for backup export and restore parsing."""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from home_ledger.ledger.backup import build_backup, parse_backup
from home_ledger.ledger.errors import MalformedBackup
from home_ledger.models.ledger import Currency, Goal


def _document(store, rates, goals=()) -> dict:
    return build_backup(store, goals, 100000, 15, rates)


class TestBuildBackup:
    """Tests for the exported document."""

    def test_document_has_five_keys(self, store, rates):
        document = _document(store, rates)
        assert set(document) == {
            "accounts",
            "goals",
            "savingsThreshold",
            "savingsPercentage",
            "exchangeRates",
        }
        assert document["exchangeRates"] == {"USD": "550", "SAR": "140"}
        assert len(document["accounts"]) == 9

    def test_document_is_json_serializable(self, store, rates):
        json.dumps(_document(store, rates))


class TestParseBackup:
    """Tests for restore validation."""

    def test_round_trip(self, store, rates):
        goal = Goal(
            id="goal-1",
            description="New car",
            target_amount=Decimal("1000"),
            target_date=datetime(2024, 7, 1, tzinfo=timezone.utc),
            created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
        )
        raw = json.dumps(_document(store, rates, goals=(goal,)))

        parsed = parse_backup(raw)
        assert parsed.account_store() == store
        assert parsed.goals == (goal,)
        assert parsed.savings_threshold == 100000
        assert parsed.savings_percentage == 15
        assert parsed.exchange_rates == {Currency.USD: Decimal("550"), Currency.SAR: Decimal("140")}

    def test_accepts_bytes_and_dicts(self, store, rates):
        document = _document(store, rates)
        assert parse_backup(json.dumps(document).encode("utf-8")).savings_percentage == 15
        assert parse_backup(document).savings_threshold == 100000

    def test_empty_goals_are_allowed(self, store, rates):
        assert parse_backup(_document(store, rates)).goals == ()

    def test_missing_field(self, store, rates):
        document = _document(store, rates)
        del document["savingsThreshold"]
        with pytest.raises(MalformedBackup, match="savingsThreshold"):
            parse_backup(document)

    def test_empty_accounts(self, store, rates):
        document = _document(store, rates)
        document["accounts"] = []
        with pytest.raises(MalformedBackup, match="accounts"):
            parse_backup(document)

    def test_empty_exchange_rates(self, store, rates):
        document = _document(store, rates)
        document["exchangeRates"] = {}
        with pytest.raises(MalformedBackup, match="exchangeRates"):
            parse_backup(document)

    def test_duplicate_accounts(self, store, rates):
        document = _document(store, rates)
        document["accounts"].append(document["accounts"][0])
        with pytest.raises(MalformedBackup):
            parse_backup(document)

    def test_not_json(self):
        with pytest.raises(MalformedBackup, match="not valid JSON"):
            parse_backup("{not json")

    def test_not_an_object(self):
        with pytest.raises(MalformedBackup, match="JSON object"):
            parse_backup("[1, 2, 3]")

    def test_undecodable_bytes(self):
        """Test that bytes which are not text are rejected as malformed."""
        with pytest.raises(MalformedBackup, match="not readable text"):
            parse_backup(b"\xff\xfe\xfa")
