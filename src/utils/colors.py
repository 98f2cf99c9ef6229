"""
ANSI Color codes for console output formatting
"""


class Colors:
    """ANSI color codes and helper methods"""
    RESET = "\033[0m"
    BOLD = "\033[1m"

    # Text Colors
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    GREY = "\033[90m"

    @classmethod
    def colorize(cls, text: str, color: str, enabled: bool = True) -> str:
        """Wrap text in color codes (no-op when disabled)"""
        if not enabled:
            return text
        return f"{color}{text}{cls.RESET}"

    @classmethod
    def label(cls, text: str, enabled: bool = True) -> str:
        """Format a header field label (Bold Cyan)"""
        return cls.colorize(text, cls.BOLD + cls.CYAN, enabled)

    @classmethod
    def error(cls, text: str, enabled: bool = True) -> str:
        """Format as an error (Red)"""
        return cls.colorize(text, cls.RED, enabled)

    @classmethod
    def dim(cls, text: str, enabled: bool = True) -> str:
        """Format secondary information (Grey)"""
        return cls.colorize(text, cls.GREY, enabled)
