"""Ownership rules for forums and comments."""


def can_mutate(actor_id: int, resource_owner_id: int) -> bool:
    """Return True when the actor owns the resource.

    Only the author of a forum or comment may update or delete it. The
    predicate never raises; callers turn a False result into ``Forbidden``.
    """
    return actor_id is not None and actor_id == resource_owner_id
