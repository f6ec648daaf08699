"""
Exception types surfaced to front ends.

Validation and state errors are always recoverable: a front end reports the
message and carries on.
"""


class SoccerCloudError(Exception):
    """Base class for all user-facing simulation errors."""


class ValidationError(SoccerCloudError):
    """Invalid request input (unknown team, duplicate pick, bad mode, ...)."""


class CapacityError(ValidationError):
    """The session already holds the maximum number of instances."""


class NotFoundError(SoccerCloudError):
    """No instance with the requested id."""

    def __init__(self, instance_id: int):
        super().__init__(f"simulation {instance_id} not found")
        self.instance_id = instance_id


class StateError(SoccerCloudError):
    """Operation not valid in the instance's current state."""


class ExportError(SoccerCloudError):
    """Writing an export failed; the underlying cause is in the message."""


class InternalError(SoccerCloudError):
    """Shared session state could not be accessed safely. Not retried."""
