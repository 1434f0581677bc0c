from ..users.models import User, UserRole


def can_mutate(actor: User, author_id: int) -> bool:
    """Only the author of a resource or an admin may change or delete it."""
    return actor.role == UserRole.ADMIN or actor.id == author_id


def ownership_clause(model, resource_id: int, actor: User) -> list:
    """
    WHERE clauses for a conditional update/delete of `model`.
    Non-admins are additionally scoped to their own rows, so a zero
    affected-row count covers both "missing" and "not yours".
    """
    clauses = [model.id == resource_id]
    if actor.role != UserRole.ADMIN:
        clauses.append(model.author_id == actor.id)
    return clauses
