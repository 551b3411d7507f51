"""Operation identity and argument binding for mocked interfaces."""

from __future__ import annotations

import dataclasses as dc
import inspect
import typing as t

from ._validators import validate_operation_name
from .errors import ConfigurationError


def is_protected(name: str) -> bool:
    """Return ``True`` for single-underscore (protected) member names."""
    return name.startswith("_") and not name.startswith("__")


@dc.dataclass(frozen=True, slots=True)
class Operation:
    """A single callable member of a mocked interface.

    ``parameters`` lists the parameter names after ``self``; variadic
    ``*args`` and ``**kwargs`` parameters each count as one parameter whose
    value is the collected tuple or dict. ``parameters`` is ``None`` for an
    operation on a spec-less mock whose arity has not been fixed yet.
    """

    name: str
    parameters: tuple[str, ...] | None = None
    signature: inspect.Signature | None = None
    return_type: t.Any = None
    implementation: t.Callable[..., t.Any] | None = None

    @property
    def arity(self) -> int | None:
        """Return the number of parameters, or ``None`` when unknown."""
        if self.parameters is None:
            return None
        return len(self.parameters)

    @property
    def protected(self) -> bool:
        """Return ``True`` when this operation is a protected member."""
        return is_protected(self.name)

    @property
    def has_base(self) -> bool:
        """Return ``True`` when a concrete implementation can be delegated to."""
        impl = self.implementation
        return impl is not None and not getattr(impl, "__isabstractmethod__", False)

    def bind(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> tuple[object, ...]:
        """Return the call's arguments laid out one value per parameter.

        Raises :class:`TypeError` when the arguments do not fit the signature,
        exactly as calling the real method would.
        """
        if self.signature is None:
            if kwargs:
                msg = (
                    f"{self.name}() on a mock without a spec accepts positional "
                    f"arguments only; got keywords {sorted(kwargs)}"
                )
                raise TypeError(msg)
            if self.parameters is not None and len(args) != len(self.parameters):
                msg = (
                    f"{self.name}() takes {len(self.parameters)} positional "
                    f"argument(s) but {len(args)} were given"
                )
                raise TypeError(msg)
            return tuple(args)
        bound = self.signature.bind(None, *args, **kwargs)
        bound.apply_defaults()
        names = self.parameters or ()
        return tuple(bound.arguments[name] for name in names)

    def with_arity(self, arity: int) -> Operation:
        """Return a copy whose anonymous parameters number *arity*."""
        return dc.replace(self, parameters=tuple(f"arg{i}" for i in range(arity)))


class Interface:
    """The set of operations a mock subject exposes."""

    def __init__(self, spec: type | None = None) -> None:
        self.spec = spec
        self._operations: dict[str, Operation] = {}
        if spec is not None:
            self._operations = dict(_discover_operations(spec))

    @property
    def dynamic(self) -> bool:
        """Return ``True`` when operations are created on first use."""
        return self.spec is None

    @property
    def operations(self) -> dict[str, Operation]:
        """Return a copy of the known operations keyed by name."""
        return dict(self._operations)

    def get(self, name: str) -> Operation | None:
        """Return the operation called *name* if it is known."""
        op = self._operations.get(name)
        if op is None and self.dynamic and not name.startswith("__"):
            op = Operation(name)
            self._operations[name] = op
        return op

    def require(self, name: str, *, protected: bool = False) -> Operation:
        """Return operation *name* or raise :class:`ConfigurationError`.

        Public configuration must not reach protected members and protected
        configuration must not reach public ones.
        """
        validate_operation_name(name)
        if is_protected(name) != protected:
            if protected:
                msg = f"{name!r} is public; configure it without protected()"
            else:
                msg = f"{name!r} is protected; use protected() to configure it"
            raise ConfigurationError(msg)
        op = self.get(name)
        if op is None:
            spec_name = self.spec.__name__ if self.spec is not None else "mock"
            msg = f"{spec_name} has no operation named {name!r}"
            raise ConfigurationError(msg)
        return op

    def fix_arity(self, name: str, arity: int) -> Operation:
        """Record *arity* for a dynamic operation the first time it is seen."""
        op = self.require(name, protected=is_protected(name))
        if op.arity is None:
            op = op.with_arity(arity)
            self._operations[name] = op
        return op


def _discover_operations(spec: type) -> t.Iterator[tuple[str, Operation]]:
    """Yield the instance methods of *spec* that a mock should intercept."""
    mangled_prefixes = tuple(
        f"_{klass.__name__.lstrip('_')}__" for klass in spec.__mro__
    )
    for name in dir(spec):
        if name.startswith("__") or name.startswith(mangled_prefixes):
            continue
        raw = inspect.getattr_static(spec, name)
        if isinstance(raw, (staticmethod, classmethod, property)):
            continue
        if not inspect.isfunction(raw):
            continue
        yield name, _operation_from_function(name, raw)


def _operation_from_function(name: str, func: t.Callable[..., t.Any]) -> Operation:
    signature = inspect.signature(func)
    params = list(signature.parameters.values())
    if not params or params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        msg = f"{name!r} does not take 'self' and cannot be mocked as a method"
        raise ConfigurationError(msg)
    return Operation(
        name=name,
        parameters=tuple(param.name for param in params[1:]),
        signature=signature,
        return_type=_resolve_return_type(func, signature),
        implementation=func,
    )


def _resolve_return_type(
    func: t.Callable[..., t.Any], signature: inspect.Signature
) -> t.Any:
    """Return the evaluated return annotation of *func*, or ``None``."""
    try:
        hints = t.get_type_hints(func)
    except Exception:  # noqa: BLE001 - unresolved forward references
        annotation = signature.return_annotation
        if annotation is inspect.Signature.empty or isinstance(annotation, str):
            return None
        return annotation
    return hints.get("return")


__all__ = ["Interface", "Operation", "is_protected"]
