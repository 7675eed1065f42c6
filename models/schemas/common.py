from marshmallow import ValidationError

from models.task import TASK_STATUSES


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def validate_not_blank(message: str):
    """Build a validator rejecting empty or whitespace-only strings."""
    def _validate(value: str) -> None:
        if value is None or not value.strip():
            raise ValidationError(message)
    return _validate


def validate_status(value: str) -> None:
    if value not in TASK_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(TASK_STATUSES)}.")


def first_error_message(messages) -> str:
    """
    Pull the first human-readable message out of marshmallow's nested
    error dict, e.g. {"email": ["Not a valid email address."]}.
    """
    if isinstance(messages, str):
        return messages
    if isinstance(messages, dict):
        for value in messages.values():
            return first_error_message(value)
    if isinstance(messages, (list, tuple)) and messages:
        return first_error_message(messages[0])
    return "Invalid input"
