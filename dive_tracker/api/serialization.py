# dive_tracker/api/serialization.py
from __future__ import annotations

import dataclasses
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any


def json_safe(obj: Any) -> Any:
    """Convierte recursivamente a tipos JSON-serializables para el cuerpo de las requests."""
    # escalares especiales
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None

    # estructuras
    if isinstance(obj, dict):
        return {str(k): json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [json_safe(v) for v in obj]

    # dataclass
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return json_safe(dataclasses.asdict(obj))

    # pydantic v2
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        return json_safe(model_dump())

    return obj
