from core.context.actor_context import ActorContext, actor_from_command

__all__ = ["ActorContext", "actor_from_command"]
