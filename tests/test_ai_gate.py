from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

from cut_sprint.services.ai_gate import check_and_reserve, get_usage

TODAY = date(2026, 10, 19)


def test_eleventh_call_is_denied(db, make_user):
    uid = make_user()
    decisions = [check_and_reserve(db, uid, TODAY) for _ in range(11)]

    assert all(d.allowed for d in decisions[:10])
    assert [d.currentUsage for d in decisions[:10]] == list(range(1, 11))
    last = decisions[10]
    assert not last.allowed
    assert (last.currentUsage, last.dailyLimit) == (10, 10)


def test_denied_calls_do_not_increment(db, make_user):
    uid = make_user()
    for _ in range(15):
        check_and_reserve(db, uid, TODAY)
    assert get_usage(db, uid, TODAY).currentUsage == 10


def test_new_day_starts_a_new_counter(db, make_user):
    uid = make_user()
    for _ in range(10):
        check_and_reserve(db, uid, TODAY)
    assert not check_and_reserve(db, uid, TODAY).allowed

    tomorrow = check_and_reserve(db, uid, TODAY + timedelta(days=1))
    assert tomorrow.allowed
    assert tomorrow.currentUsage == 1


def test_users_are_counted_separately(db, make_user):
    a, b = make_user(), make_user()
    for _ in range(10):
        check_and_reserve(db, a, TODAY)
    assert check_and_reserve(db, b, TODAY).allowed
    assert get_usage(db, b, TODAY).currentUsage == 1


def test_usage_without_any_call(db, make_user):
    uid = make_user()
    usage = get_usage(db, uid, TODAY)
    assert (usage.currentUsage, usage.dailyLimit) == (0, 10)


def test_zero_limit_denies_everything(db, make_user):
    uid = make_user()
    decision = check_and_reserve(db, uid, TODAY, limit=0)
    assert not decision.allowed
    assert decision.currentUsage == 0


def test_concurrent_reservations_never_exceed_limit(session_factory, make_user):
    uid = make_user()

    def reserve(_):
        session = session_factory()
        try:
            return check_and_reserve(session, uid, TODAY).allowed
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(reserve, range(25)))

    assert results.count(True) == 10
    check = session_factory()
    try:
        assert get_usage(check, uid, TODAY).currentUsage == 10
    finally:
        check.close()
