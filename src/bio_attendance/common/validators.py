from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


def require_date_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    if (date_from is None) != (date_to is None):
        raise ValidationError("date_from and date_to must be given together")
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")
