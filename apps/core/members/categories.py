"""Membership category table and age-based category assignment.

The table is fixed at import time. Automatic assignment scans the
non-special categories in declared order and the first age match wins;
anything unmatched falls back to ``DEFAULT_CATEGORY_ID``.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import NamedTuple

from django.utils import timezone


class MembershipCategory(NamedTuple):
    id: str
    name: str
    age_min: int
    age_max: int
    annual_fee: Decimal
    joining_fee: Decimal
    order: int
    is_special: bool = False
    joining_fee_months: tuple = ()
    playing_rights: str = '7 days'

    def covers_age(self, age: int) -> bool:
        return self.age_min <= age <= self.age_max

    def joining_fee_for_month(self, month: int) -> Decimal:
        # A declared month set limits when the joining fee is charged.
        if self.joining_fee_months and month not in self.joining_fee_months:
            return Decimal('0')
        return self.joining_fee


JUNIOR_12_UNDER = 'junior_12_under'
JUNIOR_13_15 = 'junior_13_15'
JUNIOR_16_18 = 'junior_16_18'
COLTS = 'colts'
FULL = 'full'
SENIOR = 'senior'
LIFE = 'life'
SOCIAL = 'social'

DEFAULT_CATEGORY_ID = FULL

MEMBERSHIP_CATEGORIES = (
    MembershipCategory(
        id=JUNIOR_12_UNDER,
        name='Junior 12 years and under',
        age_min=0,
        age_max=12,
        annual_fee=Decimal('50'),
        joining_fee=Decimal('0'),
        order=1,
    ),
    MembershipCategory(
        id=JUNIOR_13_15,
        name='Junior 13-15 years',
        age_min=13,
        age_max=15,
        annual_fee=Decimal('120'),
        joining_fee=Decimal('0'),
        order=2,
    ),
    MembershipCategory(
        id=JUNIOR_16_18,
        name='Junior 16-18 years',
        age_min=16,
        age_max=18,
        annual_fee=Decimal('180'),
        joining_fee=Decimal('0'),
        order=3,
    ),
    MembershipCategory(
        id=COLTS,
        name='Colts',
        age_min=19,
        age_max=23,
        annual_fee=Decimal('300'),
        joining_fee=Decimal('50'),
        order=4,
        joining_fee_months=(8, 9, 10, 11, 12),
    ),
    MembershipCategory(
        id=FULL,
        name='Full Membership',
        age_min=24,
        age_max=64,
        annual_fee=Decimal('480'),
        joining_fee=Decimal('25'),
        order=5,
    ),
    MembershipCategory(
        id=SENIOR,
        name='Senior Full Membership',
        age_min=65,
        age_max=74,
        annual_fee=Decimal('435'),
        joining_fee=Decimal('25'),
        order=6,
    ),
    MembershipCategory(
        id=LIFE,
        name='Life & Honorary Members',
        age_min=75,
        age_max=999,
        annual_fee=Decimal('75'),
        joining_fee=Decimal('0'),
        order=7,
    ),
    MembershipCategory(
        id=SOCIAL,
        name='Non-playing/Social',
        age_min=0,
        age_max=999,
        annual_fee=Decimal('40'),
        joining_fee=Decimal('25'),
        order=8,
        is_special=True,
        playing_rights='None',
    ),
)

_CATEGORIES_BY_ID = {category.id: category for category in MEMBERSHIP_CATEGORIES}


def get_all_categories():
    return sorted(MEMBERSHIP_CATEGORIES, key=lambda category: category.order)


def get_category(category_id):
    return _CATEGORIES_BY_ID.get(category_id)


def category_choices():
    return [(category.id, category.name) for category in get_all_categories()]


def parse_date(value) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f'Invalid date: {value!r}')


def calculate_age(date_of_birth, as_of=None) -> int:
    """Whole years between ``date_of_birth`` and ``as_of`` (today by default).

    The count drops by one while this year's birthday is still ahead.
    """
    birth_date = parse_date(date_of_birth)
    as_of = parse_date(as_of) if as_of is not None else timezone.localdate()

    age = as_of.year - birth_date.year
    if (as_of.month, as_of.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def determine_category_by_age(date_of_birth, as_of=None) -> str:
    try:
        age = calculate_age(date_of_birth, as_of=as_of)
    except (TypeError, ValueError):
        return DEFAULT_CATEGORY_ID

    for category in get_all_categories():
        if category.is_special:
            continue
        if category.covers_age(age):
            return category.id

    return DEFAULT_CATEGORY_ID
