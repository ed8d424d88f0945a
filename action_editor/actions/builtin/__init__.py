"""Built-in action handlers."""

# Import all built-in handlers to register them
from . import com_handler, exec_action, send_email, show_message

__all__ = []
