"""Tests for weekly availability rules and day numbering."""

from datetime import date, time

import pytest

from slotbook.core.exceptions import ValidationError
from slotbook.models import AvailabilityRule
from slotbook.schemas.availability import AvailabilityRuleCreate
from slotbook.services.availability.availability_service import AvailabilityService
from slotbook.services.availability.weekdays import day_key_for_date, day_name, storage_day_for_key
from tests.helpers import NEXT_MONDAY, NEXT_SUNDAY


def _rule(day, start, end):
    return AvailabilityRuleCreate(day_of_week=day, start_time=start, end_time=end)


class TestWeekdays:
    def test_sunday_key_maps_to_storage_zero(self):
        assert day_key_for_date(NEXT_SUNDAY) == 7
        assert storage_day_for_key(7) == 0
        assert day_name(storage_day_for_key(day_key_for_date(NEXT_SUNDAY))) == "Sunday"

    def test_weekdays_keep_their_number(self):
        assert day_key_for_date(NEXT_MONDAY) == 1
        assert storage_day_for_key(1) == 1
        assert storage_day_for_key(day_key_for_date(date(2026, 3, 14))) == 6  # Saturday

    @pytest.mark.parametrize("key", [0, 8, -1])
    def test_out_of_range_key(self, key):
        with pytest.raises(ValueError):
            storage_day_for_key(key)


class TestCreateRule:
    def test_create_and_list(self, db, owner):
        created = AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))
        AvailabilityService.create_rule(db, owner.id, _rule(0, time(10), time(11)))

        rules = AvailabilityService.list_rules(db, owner.id)

        assert created["day_of_week_name"] == "Monday"
        assert created["start_time"] == "09:00:00"
        assert [(r["day_of_week"], r["start_time"]) for r in rules] == [(0, "10:00:00"), (1, "09:00:00")]

    def test_inverted_range_rejected(self, db, owner):
        with pytest.raises(ValidationError):
            AvailabilityService.create_rule(db, owner.id, _rule(1, time(12), time(9)))

    def test_overlap_on_same_day_rejected(self, db, owner):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))

        with pytest.raises(ValidationError):
            AvailabilityService.create_rule(db, owner.id, _rule(1, time(11), time(13)))

        assert len(AvailabilityService.list_rules(db, owner.id)) == 1

    def test_touching_windows_and_other_days_allowed(self, db, owner):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(12), time(13)))
        AvailabilityService.create_rule(db, owner.id, _rule(2, time(9), time(12)))

        assert len(AvailabilityService.list_rules(db, owner.id)) == 3

    def test_rules_are_per_user(self, db, owner, other_user):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))
        AvailabilityService.create_rule(db, other_user.id, _rule(1, time(9), time(12)))

        assert len(AvailabilityService.list_rules(db, owner.id)) == 1


class TestDeleteRule:
    def test_delete_own_rule(self, db, owner):
        created = AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))
        rule_id = db.query(AvailabilityRule.id).scalar()

        assert AvailabilityService.delete_rule(db, owner.id, rule_id)
        assert AvailabilityService.list_rules(db, owner.id) == []
        assert created["id"] == str(rule_id)

    def test_cannot_delete_someone_elses_rule(self, db, owner, other_user):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))
        rule_id = db.query(AvailabilityRule.id).scalar()

        assert not AvailabilityService.delete_rule(db, other_user.id, rule_id)
        assert len(AvailabilityService.list_rules(db, owner.id)) == 1


class TestReplaceRules:
    def test_replace_swaps_whole_schedule(self, db, owner):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))

        rules = AvailabilityService.replace_rules(db, owner.id, [
            _rule(3, time(13), time(17)),
            _rule(3, time(8), time(12)),
            _rule(5, time(9), time(10)),
        ])

        assert [(r["day_of_week"], r["start_time"]) for r in rules] == [
            (3, "08:00:00"), (3, "13:00:00"), (5, "09:00:00")
        ]

    def test_overlap_within_submitted_set_leaves_old_schedule(self, db, owner):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))

        with pytest.raises(ValidationError):
            AvailabilityService.replace_rules(db, owner.id, [
                _rule(2, time(9), time(12)),
                _rule(2, time(11), time(14)),
            ])

        rules = AvailabilityService.list_rules(db, owner.id)
        assert [(r["day_of_week"], r["start_time"]) for r in rules] == [(1, "09:00:00")]

    def test_invalid_range_anywhere_rejects_everything(self, db, owner):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))

        with pytest.raises(ValidationError):
            AvailabilityService.replace_rules(db, owner.id, [
                _rule(2, time(9), time(12)),
                _rule(4, time(15), time(15)),
            ])

        assert len(AvailabilityService.list_rules(db, owner.id)) == 1

    def test_empty_set_clears_schedule(self, db, owner):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))

        assert AvailabilityService.replace_rules(db, owner.id, []) == []

    def test_other_sessions_see_the_new_schedule(self, db, owner, session_factory):
        AvailabilityService.create_rule(db, owner.id, _rule(1, time(9), time(12)))
        reader = session_factory()
        try:
            AvailabilityService.replace_rules(db, owner.id, [_rule(2, time(9), time(12))])

            seen = reader.query(AvailabilityRule).filter(AvailabilityRule.user_id == owner.id).all()
            assert [rule.day_of_week for rule in seen] == [2]
        finally:
            reader.close()
