"""
NexaProc Context - ActorContext
================================
Identity of the caller, supplied per call by the auth collaborator.
The core never authenticates; it only authorizes on (actor_id, role).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActorContext:
    actor_id: str
    role: str

    def __post_init__(self):
        if self.actor_id is None or not str(self.actor_id).strip():
            raise ValueError("actor_id must be a non-empty string.")
        # ids arrive as ints from some collaborators; compare as text
        object.__setattr__(self, "actor_id", str(self.actor_id))

        if not self.role or not isinstance(self.role, str):
            raise ValueError("role must be a non-empty string.")
        object.__setattr__(self, "role", self.role.strip().lower())


def actor_from_command(command) -> ActorContext:
    """Rebuild the issuing actor from a Command's actor fields."""
    return ActorContext(actor_id=command.actor_id, role=command.actor_role)
