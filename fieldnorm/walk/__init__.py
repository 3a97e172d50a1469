from fieldnorm.walk.walker import RecordWalker, apply

__all__ = ["RecordWalker", "apply"]
