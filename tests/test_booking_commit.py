"""
Tests for booking create / update / delete orchestration.
Run against the in-memory store and the SQLite store with its triggers.
"""

import pytest
from datetime import date, timedelta

from models.actor import Actor
from models.booking_allocation import BookingRequest, IntervalDraft
from models.booking_commit import create_booking, update_booking, delete_booking
from models.booking_errors import (
    BookingNotFound, BookingPermissionError, BookingReplaceFailed,
    BookingValidationError, OverlapConflict
)
from models.booking_slots import combine
from models.planner_settings import PlannerSettings

D0 = date(2026, 5, 4)
SETTINGS = PlannerSettings()
ADMIN = Actor(id=1, is_admin=True)
COACH = Actor(id=2)
OTHER_COACH = Actor(id=3)

CAMPO_A, CAMPO_B, SPOGLIATOIO_1 = 1, 2, 4


def field_request(**overrides):
    values = dict(resource_id=CAMPO_A, squad_id=1, start='15:00', end='16:00',
                  field_mode='FULL', locker_ids=[SPOGLIATOIO_1])
    values.update(overrides)
    return BookingRequest(**values)


def occupy(store, resource_id, day, start='15:00', end='16:00'):
    """Reserve a slot directly, as another booking would."""
    booking_id = store.insert_booking({'squad_id': 2, 'created_by': 99})
    store.insert_intervals(booking_id, [
        IntervalDraft(resource_id, combine(day, start), combine(day, end))
    ])
    return booking_id


def interval_set(store, booking_id):
    return {
        (row['resource_id'], row['start_at'], row['end_at'])
        for row in store.list_booking_intervals(booking_id)
    }


class TestCreate:
    """Single bookings and weekly series."""

    def test_single_booking(self, memory_store):
        outcome = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)

        assert outcome['success'] is True
        assert len(outcome['booking_ids']) == 1
        assert outcome['series_id'] is None
        assert outcome['intervals_written'] == 3
        assert outcome['partial'] is False

        header = memory_store.get_booking(outcome['booking_ids'][0])
        assert header['created_by'] == COACH.id
        assert header['kind'] == 'FIELD'
        assert header['category'] == 'TRAINING'
        assert header['status'] == 'PROPOSED'

    def test_single_conflict_leaves_nothing(self, memory_store):
        """A collision on one booking writes no header and no interval."""
        occupy(memory_store, CAMPO_B, D0)
        bookings_before = dict(memory_store.bookings)
        intervals_before = list(memory_store.intervals)

        with pytest.raises(OverlapConflict) as excinfo:
            create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)

        assert excinfo.value.resource_id == CAMPO_B
        assert excinfo.value.day == D0
        assert memory_store.bookings == bookings_before
        assert memory_store.intervals == intervals_before

    def test_series_skips_taken_week(self, memory_store):
        """Five weeks with week 3 taken: weeks 1, 2, 4, 5 are booked."""
        week3 = D0 + timedelta(days=14)
        occupy(memory_store, CAMPO_A, week3)
        request = field_request(recurring=True, repeat_until=D0 + timedelta(days=28))

        outcome = create_booking(request, D0, COACH, store=memory_store, settings=SETTINGS)

        assert outcome['days_booked'] == [
            D0, D0 + timedelta(days=7), D0 + timedelta(days=21), D0 + timedelta(days=28)
        ]
        assert outcome['skipped_days'] == [week3]
        assert outcome['partial'] is True
        assert len(outcome['booking_ids']) == 4
        assert outcome['intervals_written'] == 4 * 3

        written = [r for r in memory_store.intervals if r['booking_id'] in outcome['booking_ids']]
        assert len(written) == 4 * 3

    def test_series_shares_series_id(self, memory_store):
        request = field_request(recurring=True, repeat_until=D0 + timedelta(days=14))

        outcome = create_booking(request, D0, COACH, store=memory_store, settings=SETTINGS)

        series = {memory_store.get_booking(b)['series_id'] for b in outcome['booking_ids']}
        assert series == {outcome['series_id']}
        assert outcome['series_id'] is not None

    def test_series_fully_taken_books_nothing(self, memory_store):
        for week in range(3):
            occupy(memory_store, CAMPO_A, D0 + timedelta(days=7 * week))
        request = field_request(recurring=True, repeat_until=D0 + timedelta(days=14))

        outcome = create_booking(request, D0, COACH, store=memory_store, settings=SETTINGS)

        assert outcome['booking_ids'] == []
        assert len(outcome['skipped_days']) == 3

    def test_invalid_request_writes_nothing(self, memory_store):
        with pytest.raises(BookingValidationError):
            create_booking(field_request(squad_id=None), D0, COACH,
                           store=memory_store, settings=SETTINGS)
        assert memory_store.bookings == {}

    def test_invalid_series_rejected_before_writing(self, memory_store):
        request = field_request(recurring=True, repeat_until=None)

        with pytest.raises(BookingValidationError):
            create_booking(request, D0, COACH, store=memory_store, settings=SETTINGS)
        assert memory_store.bookings == {}


class TestUpdate:
    """Update is delete-then-recreate."""

    def test_update_replaces_intervals(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)
        old_id = created['booking_ids'][0]

        outcome = update_booking(old_id, field_request(start='17:00', end='18:00'), D0, COACH,
                                 store=memory_store, settings=SETTINGS)

        new_id = outcome['booking_ids'][0]
        assert outcome['replaced_booking_id'] == old_id
        assert memory_store.get_booking(old_id) is None
        assert {r[1] for r in interval_set(memory_store, new_id)} == {
            combine(D0, '17:00'), combine(D0, '16:00')
        }

    def test_admin_update_keeps_creator(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)

        outcome = update_booking(created['booking_ids'][0], field_request(notes='Spostato'), D0,
                                 ADMIN, store=memory_store, settings=SETTINGS)

        assert memory_store.get_booking(outcome['booking_ids'][0])['created_by'] == COACH.id

    def test_update_conflict_keeps_original(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)
        old_id = created['booking_ids'][0]
        before = interval_set(memory_store, old_id)
        occupy(memory_store, CAMPO_A, D0, '18:00', '19:00')

        with pytest.raises(OverlapConflict):
            update_booking(old_id, field_request(start='18:00', end='19:00'), D0, COACH,
                           store=memory_store, settings=SETTINGS)

        assert memory_store.get_booking(old_id) is not None
        assert interval_set(memory_store, old_id) == before

    def test_update_conflict_without_transactions_reports_data_loss(self, non_transactional_store):
        store = non_transactional_store
        created = create_booking(field_request(), D0, COACH, store=store, settings=SETTINGS)
        old_id = created['booking_ids'][0]
        occupy(store, CAMPO_A, D0, '18:00', '19:00')

        with pytest.raises(BookingReplaceFailed) as excinfo:
            update_booking(old_id, field_request(start='18:00', end='19:00'), D0, COACH,
                           store=store, settings=SETTINGS)

        assert excinfo.value.booking_id == old_id
        assert isinstance(excinfo.value.cause, OverlapConflict)
        assert store.get_booking(old_id) is None

    def test_update_invalid_request_changes_nothing(self, non_transactional_store):
        store = non_transactional_store
        created = create_booking(field_request(), D0, COACH, store=store, settings=SETTINGS)
        old_id = created['booking_ids'][0]

        with pytest.raises(BookingValidationError):
            update_booking(old_id, field_request(resource_id=None), D0, COACH,
                           store=store, settings=SETTINGS)

        assert store.get_booking(old_id) is not None

    def test_update_by_other_coach_forbidden(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)

        with pytest.raises(BookingPermissionError):
            update_booking(created['booking_ids'][0], field_request(), D0, OTHER_COACH,
                           store=memory_store, settings=SETTINGS)

    def test_update_missing_booking(self, memory_store):
        with pytest.raises(BookingNotFound):
            update_booking(42, field_request(), D0, ADMIN, store=memory_store, settings=SETTINGS)

    def test_update_onto_own_slot(self, memory_store):
        """The booking's own intervals never conflict with its replacement."""
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)

        outcome = update_booking(created['booking_ids'][0], field_request(), D0, COACH,
                                 store=memory_store, settings=SETTINGS)

        assert len(outcome['booking_ids']) == 1


class TestDelete:
    """Delete with cascade."""

    def test_delete_then_recreate_is_identical(self, memory_store):
        request = field_request()
        first = create_booking(request, D0, COACH, store=memory_store, settings=SETTINGS)
        original = interval_set(memory_store, first['booking_ids'][0])

        delete_booking(first['booking_ids'][0], COACH, store=memory_store)
        second = create_booking(request, D0, COACH, store=memory_store, settings=SETTINGS)

        assert second['booking_ids'] != first['booking_ids']
        assert interval_set(memory_store, second['booking_ids'][0]) == original

    def test_delete_removes_intervals(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)
        booking_id = created['booking_ids'][0]

        outcome = delete_booking(booking_id, COACH, store=memory_store)

        assert outcome == {'success': True, 'deleted': True}
        assert memory_store.list_booking_intervals(booking_id) == []

    def test_delete_twice(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)
        booking_id = created['booking_ids'][0]

        delete_booking(booking_id, COACH, store=memory_store)

        assert delete_booking(booking_id, COACH, store=memory_store) == {
            'success': True, 'deleted': False
        }

    def test_delete_by_other_coach_forbidden(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)

        with pytest.raises(BookingPermissionError):
            delete_booking(created['booking_ids'][0], OTHER_COACH, store=memory_store)

    def test_admin_may_delete_anything(self, memory_store):
        created = create_booking(field_request(), D0, COACH, store=memory_store, settings=SETTINGS)

        assert delete_booking(created['booking_ids'][0], ADMIN, store=memory_store)['deleted']


class TestSqliteStore:
    """The same flows against SQLite and its no-overlap triggers."""

    def test_series_skips_taken_week(self, sqlite_store, ids):
        campo_a = ids['resources']['Campo A']
        week3 = D0 + timedelta(days=14)
        blocker = sqlite_store.insert_booking({'squad_id': ids['squads']['Allievi']})
        sqlite_store.insert_intervals(blocker, [
            IntervalDraft(campo_a, combine(week3, '15:30'), combine(week3, '16:30'))
        ])
        request = field_request(
            resource_id=campo_a, squad_id=ids['squads']['Pulcini'],
            locker_ids=[ids['resources']['Spogliatoio 1']],
            recurring=True, repeat_until=D0 + timedelta(days=28)
        )

        outcome = create_booking(request, D0, Actor(ids['users']['mister']),
                                 store=sqlite_store, settings=SETTINGS)

        assert outcome['skipped_days'] == [week3]
        assert len(outcome['booking_ids']) == 4
        count = sqlite_store.db.execute('''
            SELECT COUNT(*) FROM booking_resources WHERE booking_id != ?
        ''', (blocker,)).fetchone()[0]
        assert count == 4 * 3

    def test_single_conflict_leaves_no_header(self, sqlite_store, ids):
        campo_b = ids['resources']['Campo B']
        blocker = sqlite_store.insert_booking({'squad_id': ids['squads']['Allievi']})
        sqlite_store.insert_intervals(blocker, [
            IntervalDraft(campo_b, combine(D0, '15:50'), combine(D0, '17:00'))
        ])
        request = field_request(resource_id=ids['resources']['Campo A'],
                                squad_id=ids['squads']['Pulcini'],
                                locker_ids=[ids['resources']['Spogliatoio 1']])

        with pytest.raises(OverlapConflict):
            create_booking(request, D0, Actor(ids['users']['mister']),
                           store=sqlite_store, settings=SETTINGS)

        db = sqlite_store.db
        assert db.execute('SELECT COUNT(*) FROM bookings').fetchone()[0] == 1
        assert db.execute('SELECT COUNT(*) FROM booking_resources').fetchone()[0] == 1

    def test_update_conflict_restores_original(self, sqlite_store, ids):
        coach = Actor(ids['users']['mister'])
        request = field_request(resource_id=ids['resources']['Campo A'],
                                squad_id=ids['squads']['Pulcini'],
                                locker_ids=[ids['resources']['Spogliatoio 1']])
        created = create_booking(request, D0, coach, store=sqlite_store, settings=SETTINGS)
        old_id = created['booking_ids'][0]
        before = interval_set(sqlite_store, old_id)

        blocker = sqlite_store.insert_booking({'squad_id': ids['squads']['Allievi']})
        sqlite_store.insert_intervals(blocker, [
            IntervalDraft(ids['resources']['Campo B'], combine(D0, '18:00'), combine(D0, '19:00'))
        ])

        moved = field_request(resource_id=ids['resources']['Campo A'],
                              squad_id=ids['squads']['Pulcini'], start='18:00', end='19:00',
                              locker_ids=[ids['resources']['Spogliatoio 1']])
        with pytest.raises(OverlapConflict):
            update_booking(old_id, moved, D0, coach, store=sqlite_store, settings=SETTINGS)

        assert sqlite_store.get_booking(old_id) is not None
        assert interval_set(sqlite_store, old_id) == before
