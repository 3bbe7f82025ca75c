from pydantic import ValidationError

from devicecfg.exception import ConfigurationRangeError, ShapeMismatchError, WidthMismatchError
from devicecfg.model.device_constant import RANGE_ERROR_TYPES, WIDTH_ERROR_TYPES


def format_location(loc: tuple, prefix: str = "") -> str:
    parts: list[str] = [prefix] if prefix else []
    for item in loc:
        if isinstance(item, int):
            if parts:
                parts[-1] = f"{parts[-1]}[{item}]"
            else:
                parts.append(f"[{item}]")
        else:
            parts.append(str(item))
    return ".".join(parts) or "<root>"


def summarize_errors(exc: ValidationError, prefix: str = "") -> str:
    return "; ".join(f"{format_location(err['loc'], prefix)}: {err['msg']}" for err in exc.errors())


def classify_validation_error(
    exc: ValidationError, location: str = "", candidate: str | None = None
) -> ShapeMismatchError | ConfigurationRangeError | WidthMismatchError:
    """
    Map a pydantic ValidationError onto the error taxonomy.

    - every error is a declared bound (ge/le, pattern, enum, required value) → ConfigurationRangeError
    - any bound error is a width check                                      → WidthMismatchError
    - anything else (wrong kind, missing key, unknown key)                  → ShapeMismatchError
    """
    errors = exc.errors()
    error_types = {err["type"] for err in errors}

    if error_types and error_types <= RANGE_ERROR_TYPES | WIDTH_ERROR_TYPES:
        width_errors = [err for err in errors if err["type"] in WIDTH_ERROR_TYPES]
        if width_errors:
            err = width_errors[0]
            ctx = err.get("ctx") or {}
            return WidthMismatchError(
                f"{format_location(err['loc'], location)}: {err['msg']}",
                value_type=ctx.get("value_type"),
                quantity=ctx.get("quantity"),
            )
        err = errors[0]
        return ConfigurationRangeError(
            summarize_errors(exc, location),
            field=format_location(err["loc"], location),
            value=err.get("input"),
        )

    return ShapeMismatchError(summarize_errors(exc, location), candidate=candidate)
