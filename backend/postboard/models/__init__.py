from postboard.models.post import Post

__all__ = ["Post"]
