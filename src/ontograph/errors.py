from __future__ import annotations


class OntographError(Exception):
    """
    Base class for all errors raised by ontograph.
    """


class InputError(OntographError, ValueError):
    """
    Invalid input to a core operation.

    Raised for vector length mismatches, empty required graphs,
    duplicate identifiers and entities whose embedding is not ready.
    Never retried internally.
    """


class CollaboratorError(OntographError):
    """
    An external collaborator (embedding or suggestion provider)
    returned something the core cannot use.
    """
