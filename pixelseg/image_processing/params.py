# -*- coding: utf-8 -*-
"""
Tunable Parameters - Constraint markers for segmenter settings.

Segmenter settings such as the cluster count, the convergence tolerance or
the neighbourhood connectivity are declared as ``typing.Annotated`` class
attributes carrying the markers defined here::

    from typing import Annotated, Optional
    from pixelseg.image_processing.params import Range, Options, Desc

    class Clustering(ImageTransform):
        tolerance: Annotated[float, Range(min=0.0, min_inclusive=False),
                             Desc('Convergence threshold')] = 1e-4
        random_seed: Annotated[Optional[int], Desc('RNG seed')] = 48
        output: Annotated[str, Options('labels', 'mean'),
                          Desc('Output format')] = 'labels'

``collect_param_specs`` turns the declarations into ``ParamSpec`` objects
and ``_make_init`` builds the keyword-only constructor that
``ImageProcessor`` installs. ``Optional[T]`` declares a setting that also
accepts ``None``, such as an unseeded random generator.

Author
------
pixelseg contributors

License
-------
MIT License
Copyright (c) 2026 pixelseg contributors
See LICENSE file for full text.

Created
-------
2026-10-19

Modified
--------
2026-10-19
"""

# Standard library
import inspect
import numbers
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

# pixelseg internal
from pixelseg.exceptions import ValidationError

Number = Union[int, float]


class ParamMeta:
    """Base class of the markers understood by ``collect_param_specs``."""

    __slots__ = ()


class Range(ParamMeta):
    """Numeric bounds on a setting.

    Parameters
    ----------
    min : int or float, optional
        Lower bound.
    max : int or float, optional
        Upper bound, inclusive.
    min_inclusive : bool
        Whether ``min`` itself is allowed. ``False`` expresses strictly
        positive settings such as a convergence tolerance.
    """

    __slots__ = ('min', 'max', 'min_inclusive')

    def __init__(
        self,
        min: Optional[Number] = None,
        max: Optional[Number] = None,
        min_inclusive: bool = True,
    ) -> None:
        self.min = min
        self.max = max
        self.min_inclusive = min_inclusive

    def __repr__(self) -> str:
        fields = []
        if self.min is not None:
            fields.append(f"min={self.min!r}")
            if not self.min_inclusive:
                fields.append("min_inclusive=False")
        if self.max is not None:
            fields.append(f"max={self.max!r}")
        return "Range(" + ", ".join(fields) + ")"


class Options(ParamMeta):
    """Closed set of allowed values, e.g. output formats."""

    __slots__ = ('choices',)

    def __init__(self, *choices: Any) -> None:
        if not choices:
            raise ValueError("Options requires at least one choice")
        self.choices = choices

    def __repr__(self) -> str:
        return f"Options{self.choices!r}"


class Desc(ParamMeta):
    """One-line description of a setting."""

    __slots__ = ('text',)

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"Desc({self.text!r})"


_MISSING = object()

# bool is an Integral, but True is never a cluster count
_NUMERIC = {
    float: numbers.Real,
    int: numbers.Integral,
}


def _type_name(tp: Any) -> str:
    return getattr(tp, '__name__', str(tp))


def _accepts(expected: Any, value: Any) -> bool:
    if expected is object:
        return True
    if expected in _NUMERIC:
        return isinstance(value, _NUMERIC[expected]) and not isinstance(value, bool)
    return isinstance(value, expected)


class ParamSpec:
    """A collected setting: its type, default and constraints.

    Attributes
    ----------
    name : str
        Keyword under which the setting is passed.
    param_type : type
        Base type, with ``Optional`` stripped.
    default : Any
        Declared default, ``None`` for required settings.
    description : str
        Text of the ``Desc`` marker.
    min_value, max_value : int, float, or None
        ``Range`` bounds.
    min_inclusive : bool
        Whether ``min_value`` itself passes.
    choices : tuple or None
        ``Options`` values.
    nullable : bool
        Whether ``None`` passes.
    """

    __slots__ = (
        'name', 'param_type', 'default', '_has_default',
        'description', 'min_value', 'max_value', 'min_inclusive',
        'choices', 'nullable',
    )

    def __init__(
        self,
        name: str,
        param_type: type,
        default: Any,
        has_default: bool,
        description: str,
        min_value: Optional[Number],
        max_value: Optional[Number],
        choices: Optional[Tuple],
        min_inclusive: bool = True,
        nullable: bool = False,
    ) -> None:
        self.name = name
        self.param_type = param_type
        self.default = default
        self._has_default = has_default
        self.description = description
        self.min_value = min_value
        self.max_value = max_value
        self.min_inclusive = min_inclusive
        self.choices = choices
        self.nullable = nullable

    @property
    def required(self) -> bool:
        return not self._has_default

    def validate(self, value: Any) -> None:
        """Check *value* against the declared type and constraints.

        Raises
        ------
        TypeError
            If *value* is not of the declared type. Integers pass for
            ``float`` settings; booleans never pass as numbers.
        ValidationError
            If *value* is out of range or not one of the choices.
        """
        if value is None and self.nullable:
            return
        if not _accepts(self.param_type, value):
            raise TypeError(
                f"Parameter '{self.name}' must be "
                f"{_type_name(self.param_type)}, got {type(value).__name__}"
            )
        self._check_bounds(value)
        if self.choices is not None and value not in self.choices:
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is not in allowed choices {self.choices!r}"
            )

    def _check_bounds(self, value: Any) -> None:
        low = self.min_value
        if low is not None:
            below = value < low if self.min_inclusive else value <= low
            if below:
                op = '>=' if self.min_inclusive else '>'
                raise ValidationError(
                    f"Parameter '{self.name}' must be {op} {low!r}, "
                    f"got {value!r}"
                )
        if self.max_value is not None and value > self.max_value:
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is above maximum {self.max_value!r}"
            )

    def __repr__(self) -> str:
        fields = [
            f"name={self.name!r}",
            f"param_type={_type_name(self.param_type)}",
            f"required={self.required!r}",
        ]
        if self._has_default:
            fields.append(f"default={self.default!r}")
        optional = (
            ('nullable', self.nullable or None),
            ('min_value', self.min_value),
            ('max_value', self.max_value),
            ('choices', self.choices),
        )
        fields.extend(f"{key}={val!r}" for key, val in optional if val is not None)
        return "ParamSpec(" + ", ".join(fields) + ")"


def _strip_optional(hint: Any) -> Tuple[Any, bool]:
    args = get_args(hint)
    if get_origin(hint) is Union and len(args) == 2 and type(None) in args:
        inner, = (a for a in args if a is not type(None))
        return inner, True
    return hint, False


def _declared_names(cls: type, hints: Dict[str, Any]) -> List[str]:
    """Annotated names in base-first declaration order, without repeats."""
    names: Dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        for name in getattr(klass, '__annotations__', {}):
            if name in hints:
                names.setdefault(name)
    return list(names)


def _spec_from_hint(cls: type, name: str, hint: Any) -> Optional[ParamSpec]:
    if get_origin(hint) is not Annotated:
        return None
    markers = {}
    for meta in hint.__metadata__:
        if isinstance(meta, ParamMeta):
            markers[type(meta)] = meta
    if not markers:
        return None
    if Range in markers and Options in markers:
        raise TypeError(
            f"Parameter '{name}' on {cls.__qualname__}: "
            f"Range and Options are mutually exclusive."
        )

    base_type, nullable = _strip_optional(get_args(hint)[0])
    bounds = markers.get(Range, Range())
    options = markers.get(Options)
    desc = markers.get(Desc)
    default = getattr(cls, name, _MISSING)
    return ParamSpec(
        name=name,
        param_type=base_type,
        default=None if default is _MISSING else default,
        has_default=default is not _MISSING,
        description=desc.text if desc else '',
        min_value=bounds.min,
        max_value=bounds.max,
        choices=options.choices if options else None,
        min_inclusive=bounds.min_inclusive,
        nullable=nullable,
    )


def collect_param_specs(cls: type) -> Tuple[ParamSpec, ...]:
    """Collect the settings declared on *cls* and its bases.

    Annotations without a ``ParamMeta`` marker are ignored. A subclass
    redeclaring a setting replaces the base declaration in place.

    Raises
    ------
    TypeError
        If one setting carries both ``Range`` and ``Options``.
    """
    try:
        hints = get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        return ()
    specs = (
        _spec_from_hint(cls, name, hints[name])
        for name in _declared_names(cls, hints)
    )
    return tuple(spec for spec in specs if spec is not None)


def _signature(param_specs: Tuple[ParamSpec, ...]) -> inspect.Signature:
    kw = inspect.Parameter.KEYWORD_ONLY
    params = [inspect.Parameter('self', inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    for spec in param_specs:
        if spec.required:
            params.append(inspect.Parameter(spec.name, kw))
        else:
            params.append(inspect.Parameter(spec.name, kw, default=spec.default))
    return inspect.Signature(params)


def _make_init(param_specs: Tuple[ParamSpec, ...]):
    """Build the keyword-only ``__init__`` installed on segmenter classes.

    Each setting is taken from the keywords or its default, validated and
    stored on the instance. ``__post_init__`` runs last when defined.
    """
    known = frozenset(spec.name for spec in param_specs)

    def __init__(self, **kwargs):
        owner = type(self).__name__
        extra = sorted(set(kwargs) - known)
        if extra:
            raise TypeError(
                f"{owner}() got unexpected keyword arguments: {', '.join(extra)}"
            )
        for spec in param_specs:
            value = kwargs.get(spec.name, spec.default)
            if spec.required and spec.name not in kwargs:
                raise TypeError(
                    f"{owner}() missing required keyword argument: '{spec.name}'"
                )
            spec.validate(value)
            object.__setattr__(self, spec.name, value)
        post_init = getattr(self, '__post_init__', None)
        if post_init is not None:
            post_init()

    __init__.__signature__ = _signature(param_specs)
    __init__.__qualname__ = '__init__'
    return __init__
