from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from telejson._errors import FunctionEvaluationError

if TYPE_CHECKING:
    from telejson.evaluate import FunctionEvaluator


@dataclass(eq=False)
class JSFunction:
    """
    A function known only by its name and source code.

    Decoding a tagged function produces a `JSFunction`. It can be called like
    the original function: the first call evaluates `source` with
    `evaluator` and later calls reuse the result. Nothing is evaluated when
    the function is decoded.

    The source is JavaScript when the data was produced by a JavaScript
    encoder, or Python when it was produced from a Python callable. The
    default evaluator only understands Python.

    **Calling a decoded function runs code from the encoded data.** Only call
    functions decoded from trusted data.
    """

    name: str
    source: str
    canonical: bool = field(default=False, repr=False)
    """True if `source` is already normalized, as it is for decoded functions."""
    evaluator: FunctionEvaluator | None = field(default=None, repr=False)
    _function: Callable[..., Any] | None = field(
        default=None, init=False, repr=False
    )

    @property  # type: ignore[misc]
    def __name__(self) -> str:
        return self.name

    def resolve(self) -> Callable[..., Any]:
        """Get the callable that `source` evaluates to, evaluating it if needed."""
        if self._function is None:
            if self.evaluator is None:
                raise FunctionEvaluationError(
                    "Cannot call a JSFunction that has no evaluator",
                    name=self.name,
                    source=self.source,
                )
            self._function = self.evaluator(self.source, self.name)
        return self._function

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.resolve()(*args, **kwargs)

    def __str__(self) -> str:
        return self.source
