"""Unit tests for the period revenue summary."""

from rentledger.schemas.ledger import Reading
from rentledger.services.summary_service import summarize_period
from rentledger.services.tariff import calculate_room_total


def test_expected_collected_unpaid(rooms, rates):
    paid = Reading(room_id="room-1", month="2024-01", curr_electricity=10, paid=True)
    unpaid = Reading(room_id="room-2", month="2024-01", curr_water=2)

    summary = summarize_period(rooms, [paid, unpaid], rates)

    paid_total = calculate_room_total(rooms[0], paid, rates)
    unpaid_total = calculate_room_total(rooms[1], unpaid, rates)
    assert summary.expected == paid_total + unpaid_total
    assert summary.collected == paid_total
    assert summary.unpaid == unpaid_total
    assert (summary.paid_count, summary.unpaid_count) == (1, 1)
    assert (summary.total_electricity, summary.total_water) == (10, 2)


def test_room_without_reading_contributes_nothing(rooms, rates):
    only_first = Reading(room_id="room-1", month="2024-01")

    summary = summarize_period(rooms, [only_first], rates)

    assert summary.expected == calculate_room_total(rooms[0], only_first, rates)
    assert summary.collected == 0


def test_empty_period(rooms, rates):
    summary = summarize_period(rooms, [], rates)

    assert summary.expected == summary.collected == summary.unpaid == 0


def test_reading_for_unknown_room_is_skipped(rooms, rates):
    orphan = Reading(room_id="room-gone", month="2024-01", paid=True)

    assert summarize_period(rooms, [orphan], rates).expected == 0


def test_to_dict_includes_unpaid(rooms, rates):
    data = summarize_period(rooms, [Reading(room_id="room-1", month="2024-01")], rates).to_dict()

    assert data["unpaid"] == data["expected"]
    assert set(data) >= {"expected", "collected", "unpaid", "paid_count", "unpaid_count"}
