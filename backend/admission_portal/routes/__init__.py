from flask import request

from ..errors import ValidationError


def json_body() -> dict:
    """Decoded JSON object body; an empty body reads as {}."""
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            raise ValidationError("Request body must be valid JSON")
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
