"""Error taxonomy shared by the codec pipeline, patch tool and verifier."""
from __future__ import annotations


class SsfError(ValueError):
    """Base class for every fatal condition raised by the pipeline.

    ``offset``, ``expected`` and ``actual`` are optional context that callers
    can use to build a precise message; they are also folded into ``str(e)``.
    """

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        expected: object = None,
        actual: object = None,
    ) -> None:
        self.message = message
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(self._render())

    def _render(self) -> str:
        ctx = []
        if self.offset is not None:
            ctx.append(f"offset={self.offset}")
        if self.expected is not None or self.actual is not None:
            ctx.append(f"expected={self.expected!r}, actual={self.actual!r}")
        return f"{self.message} ({', '.join(ctx)})" if ctx else self.message


class FormatError(SsfError):
    """Bytes do not follow the SSF1 / SMBH layout closely enough to continue."""


class ValidationError(SsfError):
    """Caller-supplied arguments are unusable (empty selector, invalid JSON value)."""


class PatchNotApplicable(SsfError):
    """Input was well formed but the patch changed nothing."""
