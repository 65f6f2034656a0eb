"""Errors raised by the interaction state machine."""
from __future__ import annotations


class InteractionError(Exception):
    """A gesture or command is not valid in the current state."""


class ModalConflictError(InteractionError):
    """A dialog was requested while another one is open."""


class IncompleteFormError(InteractionError, ValueError):
    """A relationship form is missing one of its endpoints."""
