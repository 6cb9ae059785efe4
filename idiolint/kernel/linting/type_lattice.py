"""A small, fixed slice of the analysed language's type hierarchy.

Only the types the built-in rules reason about are listed. Everything not
listed is unknown, and rules stay silent about unknown types.
"""

from __future__ import annotations

from functools import lru_cache

ANY = "Any"

# type name -> direct supertype
_PARENTS: dict[str, str] = {
    "Number": ANY,
    "Real": "Number",
    "Complex": "Number",
    "Integer": "Real",
    "AbstractFloat": "Real",
    "AbstractIrrational": "Real",
    "Rational": "Real",
    "Signed": "Integer",
    "Unsigned": "Integer",
    "Bool": "Integer",
    "Int": "Signed",
    "Int8": "Signed",
    "Int16": "Signed",
    "Int32": "Signed",
    "Int64": "Signed",
    "Int128": "Signed",
    "BigInt": "Signed",
    "UInt": "Unsigned",
    "UInt8": "Unsigned",
    "UInt16": "Unsigned",
    "UInt32": "Unsigned",
    "UInt64": "Unsigned",
    "UInt128": "Unsigned",
    "Float16": "AbstractFloat",
    "Float32": "AbstractFloat",
    "Float64": "AbstractFloat",
    "BigFloat": "AbstractFloat",
    "ComplexF64": "Complex",
    "AbstractString": ANY,
    "String": "AbstractString",
    "SubString": "AbstractString",
    "AbstractChar": ANY,
    "Char": "AbstractChar",
    "Symbol": ANY,
    "AbstractArray": ANY,
    "AbstractVector": "AbstractArray",
    "AbstractMatrix": "AbstractArray",
    "Array": "AbstractArray",
    "Vector": "AbstractVector",
    "Matrix": "AbstractMatrix",
    "AbstractRange": "AbstractVector",
    "UnitRange": "AbstractRange",
    "StepRange": "AbstractRange",
    "BitVector": "AbstractVector",
    "AbstractDict": ANY,
    "Dict": "AbstractDict",
    "IdDict": "AbstractDict",
    "AbstractSet": ANY,
    "Set": "AbstractSet",
    "BitSet": "AbstractSet",
    "Tuple": ANY,
    "NamedTuple": ANY,
    "Function": ANY,
    "Nothing": ANY,
    "Missing": ANY,
}

_CONCRETE = frozenset(
    {
        "Bool",
        "Int",
        "Int8",
        "Int16",
        "Int32",
        "Int64",
        "Int128",
        "BigInt",
        "UInt",
        "UInt8",
        "UInt16",
        "UInt32",
        "UInt64",
        "UInt128",
        "Float16",
        "Float32",
        "Float64",
        "BigFloat",
        "ComplexF64",
        "String",
        "SubString",
        "Char",
        "Symbol",
        "Array",
        "Vector",
        "Matrix",
        "UnitRange",
        "StepRange",
        "BitVector",
        "Dict",
        "IdDict",
        "Set",
        "BitSet",
        "Nothing",
        "Missing",
    }
)

# Marker types meaning "no value here"
ABSENT_MARKERS = frozenset({"Nothing", "Missing"})

CONTAINER_TYPES = frozenset(
    {
        "Array",
        "Vector",
        "Matrix",
        "AbstractArray",
        "AbstractVector",
        "AbstractMatrix",
        "Dict",
        "IdDict",
        "AbstractDict",
        "Set",
        "AbstractSet",
    }
)


def is_known(name: str) -> bool:
    return name == ANY or name in _PARENTS


def is_concrete(name: str) -> bool:
    return name in _CONCRETE


def is_abstract(name: str) -> bool:
    return is_known(name) and name not in _CONCRETE


@lru_cache(maxsize=512)
def ancestors(name: str) -> tuple[str, ...]:
    """``name`` followed by each supertype up to and including ``Any``.

    Unknown names only have themselves and ``Any``.
    """
    chain = [name]
    current = name
    while current != ANY:
        current = _PARENTS.get(current, ANY)
        chain.append(current)
    return tuple(chain)


def is_subtype(name: str, other: str) -> bool:
    """``name <: other`` within the known lattice."""
    return other in ancestors(name)


def common_ancestor(names: list[str] | tuple[str, ...]) -> str:
    """Most specific type all of ``names`` share (``Any`` when nothing narrower)."""
    if not names:
        return ANY
    shared = set(ancestors(names[0]))
    for name in names[1:]:
        shared &= set(ancestors(name))
    for candidate in ancestors(names[0]):
        if candidate in shared:
            return candidate
    return ANY


def nearest_abstract(name: str) -> str:
    """The closest strict supertype that is abstract, or ``Any``."""
    for candidate in ancestors(name)[1:]:
        if candidate != ANY and is_abstract(candidate):
            return candidate
    return ANY
