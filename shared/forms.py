from pydantic import ValidationError


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Flatten a pydantic ValidationError into ``{field: first message}`` for form re-display."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__all__"
        errors.setdefault(field, error["msg"])
    return errors
