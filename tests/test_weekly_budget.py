from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from cut_sprint.errors import BudgetConflict, IncompleteProfile, NotFound
from cut_sprint.models.weekly_budget import WeeklyBudget
from cut_sprint.schemas.responses import DailyNutritionTarget, WeeklyBudgetCreate, WeeklyBudgetUpdate
from cut_sprint.services import meal_service, nutrition_calculator, weight_service
from cut_sprint.services import weekly_budget_service as wb
from cut_sprint.utils.dates import week_bounds

MONDAY = date(2026, 10, 19)
WEDNESDAY = date(2026, 10, 21)
FRIDAY = date(2026, 10, 23)
SATURDAY = date(2026, 10, 24)
SUNDAY = date(2026, 10, 25)

INACTIVE_WEEK = 2006 * 7
ACTIVE_WEEK = 2006 * 7 + 800 * 2


def budget_rows(db, user_id):
    return db.query(WeeklyBudget).filter(WeeklyBudget.user_id == user_id).all()


def test_week_bounds_start_on_monday():
    assert week_bounds(WEDNESDAY) == (MONDAY, SUNDAY)
    assert week_bounds(SUNDAY) == (MONDAY, SUNDAY)
    assert week_bounds(MONDAY) == (MONDAY, SUNDAY)


def test_is_weekend_wraps_around_saturday():
    p = SimpleNamespace(weekend_mode="active", weekend_start_day=5, weekend_end_day=0)
    assert wb.is_weekend(p, FRIDAY)
    assert wb.is_weekend(p, SATURDAY)
    assert wb.is_weekend(p, SUNDAY)
    assert not wb.is_weekend(p, MONDAY)
    assert not wb.is_weekend(p, WEDNESDAY)


def test_is_weekend_plain_range_and_inactive_mode():
    p = SimpleNamespace(weekend_mode="active", weekend_start_day=1, weekend_end_day=3)
    assert wb.is_weekend(p, MONDAY)
    assert wb.is_weekend(p, WEDNESDAY)
    assert not wb.is_weekend(p, FRIDAY)

    off = SimpleNamespace(weekend_mode="inactive", weekend_start_day=5, weekend_end_day=0)
    assert not wb.is_weekend(off, SATURDAY)


def test_current_budget_auto_creates_once(db, make_user):
    uid = make_user()
    first = wb.current_budget(db, uid, WEDNESDAY)
    again = wb.current_budget(db, uid, SUNDAY)

    assert first.id == again.id
    assert len(budget_rows(db, uid)) == 1
    assert (first.start_date, first.end_date) == (MONDAY, SUNDAY)
    assert first.target_calories == INACTIVE_WEEK
    assert first.target_protein == 154 * 7
    assert first.weekend_bonus_calories == 0
    assert first.status == "active"


def test_next_week_gets_its_own_budget(db, make_user):
    uid = make_user()
    this_week = wb.current_budget(db, uid, WEDNESDAY)
    next_week = wb.current_budget(db, uid, WEDNESDAY + timedelta(days=7))
    assert this_week.id != next_week.id
    assert next_week.start_date == MONDAY + timedelta(days=7)


def test_weekend_mode_adds_bonus(db, make_user):
    uid = make_user(weekend_mode="active")
    budget = wb.current_budget(db, uid, WEDNESDAY)
    assert budget.target_calories == ACTIVE_WEEK
    assert budget.weekend_bonus_calories == 800


def test_weekend_budget_on_14000_base(db, make_user, monkeypatch):
    monkeypatch.setattr(
        nutrition_calculator, "daily_target",
        lambda p: DailyNutritionTarget(calories=2000, protein_g=150, fat_g=56, carbs_g=224),
    )
    uid = make_user(weekend_mode="active")
    assert wb.current_budget(db, uid, WEDNESDAY).target_calories == 15600


def test_incomplete_profile_is_reported(db, make_user):
    uid = make_user(weight=None)
    with pytest.raises(IncompleteProfile):
        wb.current_budget(db, uid, WEDNESDAY)
    assert budget_rows(db, uid) == []


def test_unknown_user(db):
    with pytest.raises(NotFound):
        wb.current_budget(db, 999, WEDNESDAY)


def test_losing_auto_create_rereads_winner(db, make_user, monkeypatch):
    uid = make_user()
    winner = WeeklyBudget(user_id=uid, start_date=MONDAY, end_date=SUNDAY, target_calories=14000,
                          target_protein=1000, target_fat=400, target_carbs=1500, status="active")
    db.add(winner)
    db.commit()

    # first lookup misses, as if the other request had not committed yet
    real_find = wb._find_week_budget
    calls = {"n": 0}

    def racy_find(session, user_id, start):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_find(session, user_id, start)

    monkeypatch.setattr(wb, "_find_week_budget", racy_find)
    budget = wb.current_budget(db, uid, WEDNESDAY)

    assert budget.id == winner.id
    assert budget.target_calories == 14000
    assert len(budget_rows(db, uid)) == 1


def test_concurrent_auto_create_yields_one_row(session_factory, make_user):
    uid = make_user()

    def call(_):
        session = session_factory()
        try:
            return wb.current_budget(session, uid, WEDNESDAY).id
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=6) as pool:
        ids = list(pool.map(call, range(12)))

    assert len(set(ids)) == 1
    check = session_factory()
    try:
        assert len(budget_rows(check, uid)) == 1
    finally:
        check.close()


def test_completed_week_is_left_as_stored(db, make_user):
    uid = make_user()
    last_wednesday = WEDNESDAY - timedelta(days=7)
    budget = wb.current_budget(db, uid, last_wednesday)
    wb.update_budget(db, budget.id, WeeklyBudgetUpdate(status="completed", target_calories=9999))

    progress = wb.weekly_progress(db, uid, last_wednesday)
    wb.daily_breakdown(db, uid, last_wednesday)
    wb.weekend_compensation_plan(db, uid, last_wednesday)
    again = wb.current_budget(db, uid, last_wednesday)

    assert progress.target_calories == 9999
    assert again.id == budget.id
    assert again.status == "completed"
    assert again.target_calories == 9999
    assert len(budget_rows(db, uid)) == 1


def test_cancelled_week_is_not_replaced(db, make_user):
    uid = make_user()
    budget = wb.current_budget(db, uid, WEDNESDAY)
    wb.update_budget(db, budget.id, WeeklyBudgetUpdate(status="cancelled", target_calories=9000))

    again = wb.current_budget(db, uid, FRIDAY)
    assert again.id == budget.id
    assert again.status == "cancelled"
    assert again.target_calories == 9000


@pytest.mark.parametrize("start, end", [
    (WEDNESDAY, WEDNESDAY + timedelta(days=6)),
    (MONDAY, FRIDAY),
    (MONDAY, SUNDAY + timedelta(days=7)),
])
def test_create_requires_monday_to_sunday(db, make_user, start, end):
    uid = make_user()
    with pytest.raises(ValueError):
        wb.create_budget(db, uid, WeeklyBudgetCreate(
            start_date=start, end_date=end,
            target_calories=14000, target_protein=1000, target_fat=400, target_carbs=1500,
        ))
    assert budget_rows(db, uid) == []

    wb.current_budget(db, uid, FRIDAY)
    assert len(budget_rows(db, uid)) == 1


def test_create_list_update(db, make_user):
    uid = make_user()
    older = wb.create_budget(db, uid, WeeklyBudgetCreate(
        start_date=MONDAY - timedelta(days=7), end_date=SUNDAY - timedelta(days=7),
        target_calories=14000, target_protein=1000, target_fat=400, target_carbs=1500,
    ))
    newer = wb.current_budget(db, uid, WEDNESDAY)

    assert [b.id for b in wb.list_budgets(db, uid)] == [newer.id, older.id]
    assert [b.id for b in wb.list_budgets(db, uid, limit=1)] == [newer.id]

    updated = wb.update_budget(db, older.id, WeeklyBudgetUpdate(status="completed"))
    assert updated.status == "completed"
    assert updated.target_calories == 14000


def test_create_duplicate_week_conflicts(db, make_user):
    uid = make_user()
    wb.current_budget(db, uid, WEDNESDAY)
    with pytest.raises(BudgetConflict):
        wb.create_budget(db, uid, WeeklyBudgetCreate(
            start_date=MONDAY, end_date=SUNDAY,
            target_calories=14000, target_protein=1000, target_fat=400, target_carbs=1500,
        ))
    assert len(budget_rows(db, uid)) == 1


def test_get_missing_budget(db):
    with pytest.raises(NotFound):
        wb.get_budget(db, 12345)


def test_daily_breakdown(db, make_user, make_product):
    uid = make_user(weekend_mode="active", weekend_start_day=5, weekend_end_day=0)
    pid = make_product(calories=200, protein=10, fat=5, carbs=20)
    meal_service.log_meal(db, uid, SATURDAY, "lunch", [(pid, 300)])

    base = round(ACTIVE_WEEK / 7)
    sat = wb.daily_breakdown(db, uid, SATURDAY)
    assert sat.is_weekend
    assert sat.weekend_bonus == 800
    assert sat.target_calories == base + 800
    assert sat.actual_calories == 600
    assert sat.remaining_calories == base + 800 - 600

    wed = wb.daily_breakdown(db, uid, WEDNESDAY)
    assert not wed.is_weekend
    assert wed.weekend_bonus == 0
    assert wed.target_calories == base
    assert wed.actual_calories == 0


@pytest.mark.parametrize("weekend_date", [FRIDAY, SATURDAY, SUNDAY])
def test_compensation_plan_three_weekdays(db, make_user, weekend_date):
    uid = make_user(weekend_mode="active")
    plan = wb.weekend_compensation_plan(db, uid, weekend_date)

    assert plan.weekend_bonus == 800
    assert plan.total_compensation == 800
    assert len(plan.compensation_days) == 3
    assert [d.date for d in plan.compensation_days] == [
        date(2026, 10, 26), date(2026, 10, 27), date(2026, 10, 28),
    ]
    for day in plan.compensation_days:
        assert day.date.weekday() < 5
        assert day.date > weekend_date
        assert day.compensation_calories == round(800 / 3)


def test_compensation_plan_skips_weekend_from_midweek(db, make_user):
    uid = make_user(weekend_mode="active")
    plan = wb.weekend_compensation_plan(db, uid, WEDNESDAY)
    assert [d.date for d in plan.compensation_days] == [
        date(2026, 10, 22), date(2026, 10, 23), date(2026, 10, 26),
    ]


def test_compensation_plan_empty_without_bonus(db, make_user):
    uid = make_user()
    plan = wb.weekend_compensation_plan(db, uid, SATURDAY)
    assert plan.weekend_bonus == 0
    assert plan.compensation_days == []
    assert plan.total_compensation == 0


def test_weekly_progress(db, make_user, make_product):
    uid = make_user()
    pid = make_product(calories=100, protein=10, fat=2, carbs=10)
    meal_service.log_meal(db, uid, MONDAY, "breakfast", [(pid, 2000)])
    meal_service.log_meal(db, uid, WEDNESDAY, "dinner", [(pid, 3000)])
    meal_service.log_meal(db, uid, MONDAY + timedelta(days=7), "dinner", [(pid, 5000)])  # next week
    weight_service.add_weight(db, uid, MONDAY, 80.0)
    weight_service.add_weight(db, uid, SUNDAY, 79.2)

    progress = wb.weekly_progress(db, uid, WEDNESDAY)
    assert (progress.week_start, progress.week_end) == (MONDAY, SUNDAY)
    assert progress.target_calories == INACTIVE_WEEK
    assert progress.actual_calories == 5000
    assert progress.deficit == INACTIVE_WEEK - 5000
    assert progress.progress_percentage == round(5000 / INACTIVE_WEEK * 100)
    assert progress.weight_start == 80.0
    assert progress.weight_end == 79.2
    assert progress.weight_loss == pytest.approx(0.8)
    assert progress.target_loss == 0.5


def test_weekly_progress_without_weights(db, make_user):
    uid = make_user()
    weight_service.add_weight(db, uid, MONDAY, 80.0)
    progress = wb.weekly_progress(db, uid, WEDNESDAY)
    assert progress.weight_start == 0
    assert progress.weight_end == 0
    assert progress.weight_loss == 0
    assert progress.progress_percentage == 0


def test_suggestions_under_budget_with_fast_loss(db, make_user):
    uid = make_user()
    weight_service.add_weight(db, uid, MONDAY, 80.0)
    weight_service.add_weight(db, uid, WEDNESDAY, 79.0)

    out = wb.budget_suggestions(db, uid, WEDNESDAY)
    assert out.message == "Progress: 0% of the weekly budget used"
    assert "You are well below this week's budget" in out.suggestions
    assert [(a.type, a.value) for a in out.adjustments] == [("increase_calories", 200)]


def test_suggestions_over_budget_with_slow_loss(db, make_user, make_product):
    uid = make_user()
    pid = make_product(calories=100, protein=0, fat=0, carbs=25)
    meal_service.log_meal(db, uid, MONDAY, "dinner", [(pid, 17000)])  # 17000 kcal > 110%
    weight_service.add_weight(db, uid, MONDAY, 80.0)
    weight_service.add_weight(db, uid, WEDNESDAY, 79.9)

    out = wb.budget_suggestions(db, uid, WEDNESDAY)
    assert "You are more than 10% over this week's budget" in out.suggestions
    assert [(a.type, a.value) for a in out.adjustments] == [("decrease_calories", 200)]


def test_suggestions_within_budget(db, make_user, make_product):
    uid = make_user()
    pid = make_product(calories=100, protein=0, fat=0, carbs=25)
    meal_service.log_meal(db, uid, MONDAY, "dinner", [(pid, 14042)])
    out = wb.budget_suggestions(db, uid, WEDNESDAY)
    assert out.suggestions == ["Great, you are within this week's budget"]
    assert out.adjustments == []


def test_budget_status(db, make_user, make_product):
    uid = make_user()
    pid = make_product(calories=100, protein=0, fat=0, carbs=25)
    meal_service.log_meal(db, uid, MONDAY, "dinner", [(pid, 4042)])

    status = wb.budget_status(db, uid, WEDNESDAY)
    assert status.remaining_days == 5
    assert status.average_remaining_per_day == 2000
    assert status.is_on_track
    assert status.can_afford_weekend


def test_budget_status_overspent(db, make_user, make_product):
    uid = make_user()
    pid = make_product(calories=100, protein=0, fat=0, carbs=25)
    meal_service.log_meal(db, uid, MONDAY, "dinner", [(pid, 16000)])

    status = wb.budget_status(db, uid, SUNDAY)
    assert status.remaining_days == 1
    assert not status.is_on_track
    assert not status.can_afford_weekend
