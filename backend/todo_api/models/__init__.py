from todo_api.models.todo import Todo
from todo_api.models.user import User

__all__ = ["Todo", "User"]
