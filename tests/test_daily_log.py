"""Tests for daily log and weight log mutations."""

from datetime import date, timedelta

from nutrimind.db.models.schemas import DayEntry, Meal, WeightEntry
from nutrimind.services.daily_log import (
    add_meal,
    add_water,
    find_day,
    log_weight,
    weight_trend,
)


def _iso(offset):
    return (date(2026, 10, 1) + timedelta(days=offset)).isoformat()


def test_meals_sum_into_the_same_day():
    history = add_meal([], _iso(0), Meal(description="Oats", kcal=400, protein=20, carbs=60, fats=8))
    history = add_meal(history, _iso(0), Meal(kcal=600, protein=45, carbs=50, fats=20))

    assert len(history) == 1
    day = history[0]
    assert (day.kcal, day.protein, day.carbs, day.fats) == (1000, 65, 110, 28)
    assert [m.description for m in day.meals] == ["Oats", "Meal"]


def test_water_adds_to_day_totals():
    history = add_water([], _iso(0), 16)
    history = add_water(history, _iso(0), 8)
    assert find_day(history, _iso(0)).hydrationOz == 24


def test_input_history_is_not_mutated():
    original = [DayEntry(date=_iso(0), kcal=100)]
    add_meal(original, _iso(0), Meal(kcal=50))
    assert original[0].kcal == 100


def test_eighth_day_evicts_the_oldest():
    history = [DayEntry(date=_iso(i), kcal=2000) for i in range(7)]
    history = add_meal(history, _iso(7), Meal(kcal=500))

    assert len(history) == 7
    assert [d.date for d in history] == [_iso(i) for i in range(1, 8)]


def test_entries_stay_sorted_by_date():
    history = [DayEntry(date=_iso(3)), DayEntry(date=_iso(1))]
    history = add_water(history, _iso(2), 8)
    assert [d.date for d in history] == [_iso(1), _iso(2), _iso(3)]


def test_same_day_weight_overwrites():
    history = log_weight([], _iso(0), 180)
    history = log_weight(history, _iso(0), 178.5)
    assert history == [WeightEntry(date=_iso(0), weight=178.5)]


def test_weight_history_keeps_sixty_entries():
    history = []
    for i in range(65):
        history = log_weight(history, _iso(i), 200 - i * 0.1)
    assert len(history) == 60
    assert history[0].date == _iso(5)
    assert history[-1].date == _iso(64)


def test_weight_trend():
    history = [
        WeightEntry(date=_iso(0), weight=180),
        WeightEntry(date=_iso(1), weight=179),
        WeightEntry(date=_iso(2), weight=178),
    ]
    trend = weight_trend(history)
    assert trend.change == -2
    assert trend.changePerEntry == -1
    assert trend.direction == "down"
    assert (trend.min, trend.max) == (178, 180)
    assert weight_trend([]) is None
    assert weight_trend(history[:1]).direction == "flat"
