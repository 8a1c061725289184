import logging

from black import (
    FileMode,
    format_str as black_format_str,
    NothingChanged as BlackNothingChanged,
)

from scrud_generator.constants import GenerationOptions


logger = logging.getLogger(__name__)

BLACK_FORMATTER_MODE = FileMode(line_length=GenerationOptions.DEFAULT_LINE_LENGTH)


def format_python_code_using_black(label: str, code_string: str) -> str:
    """Formats the given Python code using Black."""
    try:
        formatted_code = black_format_str(code_string, mode=BLACK_FORMATTER_MODE)
        logger.debug(f"Formatted code using Black: {label}")
        return formatted_code
    except BlackNothingChanged:
        logger.debug(f"Black formatter did not change the code: {label}")
        return code_string
    except Exception as e:
        # Log an error if Black fails for some reason (e.g., invalid syntax not caught earlier)
        logger.error(f"Could not format Python code using Black: {e}", exc_info=False)
        logger.warning("Writing unformatted Python code due to Black error.")
        return code_string
