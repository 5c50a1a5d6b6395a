"""JSON:API error taxonomy and store-error mapping.

Every per-request failure is raised as a :class:`JsonapiError` subclass and
rendered by the application's exception handlers as a single-element
``{"errors": [...]}`` document. :class:`ConfigurationError` is the only
exception that is never rendered: it aborts application startup.
"""

from __future__ import annotations

from http import HTTPStatus

from apipls.store import StoreError, StoreErrorKind


class ConfigurationError(Exception):
    """Raised at startup when a resource model cannot be compiled."""


class JsonapiError(Exception):
    """Base class for errors rendered as a JSON:API error object."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    title = "Server Error"
    detail = "There was an error while processing this request."

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)

    def to_error(self) -> dict:
        """Return the JSON:API error object for this exception."""
        return {
            "status": str(self.status_code.value),
            "title": self.title,
            "detail": self.detail,
        }


class ValidationError(JsonapiError):
    """The request body or query failed shape or type checks."""

    status_code = HTTPStatus.BAD_REQUEST
    title = "Validation Error"
    detail = "The request was not valid."


class NoValidFieldsError(JsonapiError):
    """A field selection or write payload resolved to zero usable columns."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    title = "No Valid Fields"

    def __init__(self, plural_form: str) -> None:
        super().__init__(f"No valid fields were specified for {plural_form}.")


class ResourceNotFoundError(JsonapiError):
    status_code = HTTPStatus.NOT_FOUND
    title = "Resource Not Found"
    detail = "The requested resource does not exist."


class RouteNotFoundError(JsonapiError):
    status_code = HTTPStatus.NOT_FOUND
    title = "Not Found"
    detail = "The requested endpoint does not exist."


class MethodNotAllowedError(JsonapiError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED
    title = "Method Not Allowed"
    detail = "This method is not permitted on this resource."


class ConstraintViolationError(JsonapiError):
    """A write was rejected by a store-level constraint."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    title = "Constraint Violation"

    def __init__(
        self,
        detail: str,
        title: str | None = None,
        status_code: HTTPStatus | None = None,
    ) -> None:
        super().__init__(detail)
        if title is not None:
            self.title = title
        if status_code is not None:
            self.status_code = status_code


class GenericStoreError(JsonapiError):
    """Any unrecognized failure. The detail never carries store internals."""


class UnsupportedMediaTypeError(JsonapiError):
    status_code = HTTPStatus.UNSUPPORTED_MEDIA_TYPE
    title = "Unsupported Media Type"
    detail = "The JSON API media type must not be sent with media type parameters."


class NotAcceptableError(JsonapiError):
    status_code = HTTPStatus.NOT_ACCEPTABLE
    title = "Not Acceptable"
    detail = "The Accept header must allow the JSON API media type without parameters."


def map_store_error(exc: StoreError, plural_form: str) -> JsonapiError:
    """Translate a typed store failure into the error returned to the client.

    Args:
        exc: The failure raised by the store.
        plural_form: Plural name of the resource the statement targeted,
            used in the constraint messages.

    Returns:
        The JSON:API error to render. Unrecognized kinds collapse to
        :class:`GenericStoreError`.
    """
    match exc.kind:
        case StoreErrorKind.NO_DATA:
            return ResourceNotFoundError()
        case StoreErrorKind.UNIQUE_VIOLATION:
            return ConstraintViolationError(
                f"A resource in {plural_form} already has one of these unique values.",
                title="Conflict",
                status_code=HTTPStatus.CONFLICT,
            )
        case StoreErrorKind.FOREIGN_KEY_VIOLATION:
            return ConstraintViolationError(
                f"A relationship on {plural_form} refers to a resource that does not exist.",
                title="Invalid Relationship",
            )
        case StoreErrorKind.NOT_NULL_VIOLATION:
            return ConstraintViolationError(
                f"A required field on {plural_form} was missing or null.",
                title="Missing Required Field",
            )
        case StoreErrorKind.CHECK_VIOLATION:
            return ConstraintViolationError(
                f"A value on {plural_form} failed a constraint check.",
            )
        case _:
            return GenericStoreError()
