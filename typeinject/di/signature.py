"""Parameter and result type extraction for callables.

The container never guesses: a dependency is identified by the parameter's
type annotation and a provider's outputs by its return annotation.
"""

import functools
import inspect
from typing import Any, Callable, Dict, NamedTuple, Tuple, get_args, get_origin, get_type_hints

from loguru import logger

from ..errors import NotCallableError, ProviderError, UsageError
from .types import strip_annotated

EMPTY = inspect.Parameter.empty

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class Dependency(NamedTuple):
    """A callable parameter the container has to supply."""

    name: str
    kind: Any
    type_id: Any = EMPTY
    default: Any = EMPTY

    @property
    def keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY


def callable_name(func: Any) -> str:
    """Best-effort readable name of a callable for messages."""
    if isinstance(func, functools.partial):
        return f"partial({callable_name(func.func)})"
    return getattr(func, "__qualname__", None) or type(func).__qualname__


def _hints_source(func: Any) -> Any:
    """Return the object whose annotations describe ``func``'s call signature."""
    if inspect.isclass(func):
        return func.__init__
    if isinstance(func, functools.partial):
        return _hints_source(func.func)
    if inspect.isroutine(func):
        return func
    return type(func).__call__


def type_hints(obj: Any) -> Dict[str, Any]:
    """Resolved annotations of ``obj``, keeping ``Annotated`` metadata.

    Falls back to the raw ``__annotations__`` when forward references cannot
    be evaluated.
    """
    try:
        return get_type_hints(obj, include_extras=True)
    except (NameError, TypeError) as e:
        logger.warning(
            f"Could not resolve annotations of {callable_name(obj)} ({e}); "
            "unresolved forward references are used as type identifiers"
        )
        return dict(getattr(obj, "__annotations__", None) or {})


def _signature(func: Callable[..., Any]) -> inspect.Signature:
    try:
        return inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise UsageError(f"Cannot inspect the signature of {callable_name(func)}", cause=e)


def dependencies(func: Callable[..., Any]) -> Tuple[Dependency, ...]:
    """Extract the ordered parameters of ``func`` with their type identifiers.

    ``*args`` and ``**kwargs`` are not dependencies. Parameters without an
    annotation are returned with ``type_id`` set to ``EMPTY``.

    Args:
        func: Function, method, class, partial or callable instance

    Returns:
        Tuple of dependencies in declaration order

    Raises:
        NotCallableError: If ``func`` is not callable
        UsageError: If the signature cannot be inspected
    """
    if not callable(func):
        raise NotCallableError(func)

    sig = _signature(func)
    hints = type_hints(_hints_source(func))

    deps = []
    for name, param in sig.parameters.items():
        if param.kind in _SKIPPED_KINDS:
            continue
        annotation = param.annotation
        # get_type_hints adds Optional[...] for None defaults on Python 3.10
        if isinstance(annotation, str):
            annotation = hints.get(name, annotation)
        type_id = EMPTY if annotation is EMPTY else strip_annotated(annotation)
        deps.append(Dependency(name, param.kind, type_id, param.default))
    return tuple(deps)


def result_types(func: Callable[..., Any]) -> Tuple[Tuple[Any, ...], bool]:
    """Extract the declared output types of a provider.

    A class produces itself. Otherwise the return annotation decides:
    ``-> T`` is one output, ``-> tuple[A, B]`` is two outputs returned as a
    tuple, ``-> tuple[A, ...]`` is a single output and ``-> None`` none.

    Returns:
        ``(types, unpack)`` where ``unpack`` tells whether the return value is
        a tuple to be split across ``types``

    Raises:
        ProviderError: If ``func`` has no return annotation
    """
    if inspect.isclass(func):
        return (func,), False

    annotation = type_hints(_hints_source(func)).get("return", EMPTY)
    if annotation is EMPTY:
        annotation = _signature(func).return_annotation
    if annotation is inspect.Signature.empty:
        raise ProviderError(
            f"Provider {callable_name(func)} has no return annotation; "
            "its output types cannot be determined",
            provider=func,
        )

    annotation = strip_annotated(annotation)
    if annotation is None or annotation is type(None):
        return (), False

    if get_origin(annotation) is tuple:
        if annotation is Tuple:
            return (tuple,), False
        args = get_args(annotation)
        if args == ((),):  # Tuple[()] on Python 3.10
            args = ()
        if len(args) == 2 and args[1] is Ellipsis:
            return (annotation,), False
        return tuple(strip_annotated(arg) for arg in args), True

    return (annotation,), False
