from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from .categories import get_category, parse_date

# January and February still belong to the season that is about to renew.
NEW_SEASON_MONTHS = (1, 2)
PRO_RATA_MONTHS = (8, 9, 10, 11, 12)


def _whole_units(value: Decimal) -> Decimal:
    return value.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def pro_rata_breakdown(category_id, joining_date):
    category = get_category(category_id)
    month = parse_date(joining_date).month

    if category is None:
        return {
            'subscription': Decimal('0'),
            'joining_fee': Decimal('0'),
            'total': Decimal('0'),
            'months_remaining': 0,
            'month': month,
        }

    joining_fee = category.joining_fee_for_month(month)

    if month in NEW_SEASON_MONTHS:
        months_remaining = 0
        subscription = Decimal('0')
    elif month in PRO_RATA_MONTHS:
        # Months left until the February cutoff.
        months_remaining = 13 - month
        subscription = _whole_units(Decimal(months_remaining) * category.annual_fee / Decimal('12'))
    else:
        months_remaining = 12
        subscription = category.annual_fee

    return {
        'subscription': subscription,
        'joining_fee': joining_fee,
        'total': subscription + joining_fee,
        'months_remaining': months_remaining,
        'month': month,
    }


def calculate_pro_rata_fee(category_id, joining_date) -> Decimal:
    """Joining-year cost for a new member of ``category_id``.

    Jan-Feb charge only the joining fee, Aug-Dec charge the remaining
    months of subscription rounded to whole units plus the joining fee, and
    Mar-Jul charge a full year plus the joining fee. Unknown categories
    cost nothing.
    """
    return pro_rata_breakdown(category_id, joining_date)['total']
