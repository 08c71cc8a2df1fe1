"""Call stack tracking for BCalc function calls."""

from dataclasses import dataclass
from typing import Dict, List

from bcalc.bcalc_math import format_number


class BCalcCallStack:
    """
    Call stack for tracking user function calls and providing detailed error messages.
    """

    @dataclass
    class CallFrame:
        """Represents a single function call frame."""
        function_name: str
        arguments: Dict[str, float]

    def __init__(self) -> None:
        """Initialize empty call stack."""
        self.frames: List[BCalcCallStack.CallFrame] = []

    def push(self, function_name: str, arguments: Dict[str, float]) -> None:
        """
        Push a new call frame onto the stack.

        Args:
            function_name: Name of the function being called
            arguments: Dictionary of parameter names to values
        """
        self.frames.append(BCalcCallStack.CallFrame(function_name=function_name, arguments=arguments))

    def pop(self) -> 'BCalcCallStack.CallFrame | None':
        """Pop the top call frame from the stack, or return None if it is empty."""
        if self.frames:
            return self.frames.pop()

        return None

    def depth(self) -> int:
        """Get the current call stack depth."""
        return len(self.frames)

    def format_stack_trace(self, max_frames: int = 10) -> str:
        """
        Format the innermost frames as a string for error messages.

        Args:
            max_frames: Maximum number of frames to include

        Returns:
            Formatted stack trace string
        """
        if not self.frames:
            return "  (no function calls)"

        lines = []
        if len(self.frames) > max_frames:
            lines.append(f"  ... ({len(self.frames) - max_frames} more frames)")

        for frame in self.frames[-max_frames:]:
            args_str = ", ".join(f"{k}={format_number(v)}" for k, v in frame.arguments.items())
            lines.append(f"  {frame.function_name}({args_str})")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"BCalcCallStack(depth={len(self.frames)})"
