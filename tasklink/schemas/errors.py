from typing import Dict, List

from pydantic import ValidationError


def error_map(exc: ValidationError) -> Dict[str, List[str]]:
    """Flatten a pydantic ValidationError into ``{"field.path": [messages]}``"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        errors.setdefault(field, []).append(error["msg"])
    return errors
