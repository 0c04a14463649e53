from datetime import date

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from engine.dates import as_date

AS_OF_PARAM = 'as_of'


def today_for(request) -> date:
    """
    The reference date for one request.

    Clients may pin it with ``?as_of=YYYY-MM-DD`` so that every figure in a
    response (and across related requests) is computed against the same day.
    """
    raw = request.query_params.get(AS_OF_PARAM) if request is not None else None
    if not raw:
        return timezone.localdate()
    day = as_date(raw)
    if day is None:
        raise ValidationError({AS_OF_PARAM: f"Invalid date '{raw}', expected YYYY-MM-DD"})
    return day
