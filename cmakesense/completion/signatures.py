"""Call-tip signatures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from cmakesense.parsers.cmake.methods import ParameterSlot
from cmakesense.parsers.cmake.parsing import ParameterInfoContext, TextSpan


class ParameterInfoSink(Protocol):
    """Receiver of the call-tip events a host editor understands."""

    def start_name(self, span: TextSpan, name: str) -> None: ...

    def start_parameters(self, span: TextSpan) -> None: ...

    def next_parameter(self, span: TextSpan) -> None: ...

    def end_parameters(self, span: TextSpan) -> None: ...


@dataclass(frozen=True)
class Signature:
    """Parameter signature of the command enclosing the cursor.

    Attributes:
        command_name: Display name, e.g. ``add_executable`` or ``file(GLOB``.
        parameters: Display text of each parameter.
        delimiter: Separator between parameters.
        open_bracket: Text shown between the name and the first parameter.
        close_bracket: Text shown after the last parameter.
        name_span: Span of the command name in the buffer.
        start_span: Span of the opening parenthesis.
        next_spans: Spans of the argument separators typed so far.
        end_span: Span of the closing parenthesis, if known.
        current_parameter: Index of the parameter the cursor is in.
    """

    command_name: str
    parameters: Tuple[str, ...]
    name_span: TextSpan
    start_span: TextSpan
    next_spans: Tuple[TextSpan, ...] = ()
    end_span: Optional[TextSpan] = None
    delimiter: str = " "
    open_bracket: str = "("
    close_bracket: str = ")"
    current_parameter: int = 0

    @classmethod
    def from_context(
        cls,
        context: ParameterInfoContext,
        parameters: Sequence[ParameterSlot | str],
        command_name: Optional[str] = None,
        open_bracket: str = "(",
        leading_arguments: int = 0,
    ) -> "Signature":
        """Build a signature; ``leading_arguments`` are typed arguments that
        belong to the displayed name, such as a subcommand keyword."""
        names = tuple(p if isinstance(p, str) else p.display for p in parameters)
        name = command_name or context.command_name
        return cls(
            command_name=name,
            parameters=names,
            name_span=context.name_span,
            start_span=context.start_span,
            next_spans=tuple(context.next_spans),
            end_span=context.end_span,
            open_bracket=open_bracket,
            current_parameter=max(context.current_parameter - leading_arguments, 0),
        )

    @property
    def display(self) -> str:
        return f"{self.command_name}{self.open_bracket}{self.delimiter.join(self.parameters)}{self.close_bracket}"

    @property
    def active_parameter(self) -> Optional[str]:
        """Parameter the cursor is in, clamped to the last (variadic) one."""
        if not self.parameters:
            return None
        return self.parameters[min(self.current_parameter, len(self.parameters) - 1)]

    def replay(self, sink: ParameterInfoSink) -> None:
        """Emit the boundary events of this signature to ``sink`` in order."""
        sink.start_name(self.name_span, self.command_name)
        sink.start_parameters(self.start_span)
        for span in self.next_spans:
            sink.next_parameter(span)
        if self.end_span is not None:
            sink.end_parameters(self.end_span)

    def to_dict(self) -> Dict[str, Any]:
        def span(value: Optional[TextSpan]) -> Optional[List[int]]:
            if value is None:
                return None
            return [value.start_line, value.start_index, value.end_line, value.end_index]

        return {
            "command": self.command_name,
            "parameters": list(self.parameters),
            "delimiter": self.delimiter,
            "display": self.display,
            "current_parameter": self.current_parameter,
            "name_span": span(self.name_span),
            "start_span": span(self.start_span),
            "next_spans": [span(s) for s in self.next_spans],
            "end_span": span(self.end_span),
        }
