"""Output options appended after the ``output`` keyword of a pdftk command."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Union

from .exceptions import ContractViolationError

LOGGER = logging.getLogger("pdftkx.options")

MASK = "******"

PERMISSIONS = (
    "Printing",
    "DegradedPrinting",
    "ModifyContents",
    "Assembly",
    "CopyContents",
    "ScreenReaders",
    "ModifyAnnotations",
    "FillIn",
    "AllFeatures",
)

FLAG_OPTIONS = frozenset(
    {
        "flatten",
        "drop_xfa",
        "drop_xmp",
        "need_appearances",
        "keep_first_id",
        "keep_final_id",
        "compress",
        "uncompress",
        "encrypt_128bit",
        "encrypt_40bit",
    }
)
VALUE_OPTIONS = frozenset({"owner_pw", "user_pw", "allow"})
SENSITIVE_OPTIONS = frozenset({"owner_pw", "user_pw"})


@dataclass(frozen=True)
class Option:
    """A single pdftk output option.

    Flag options have ``value=None``. Value options are rendered as
    ``name value``; ``allow`` spreads its permissions over several tokens.
    Sensitive values never leave :meth:`to_args`.
    """

    name: str
    value: Optional[str] = None
    sensitive: bool = False

    def to_args(self) -> list[str]:
        if self.value is None:
            return [self.name]
        if self.name == "allow":
            return [self.name, *self.value.split()]
        return [self.name, self.value]

    def to_display_args(self) -> list[str]:
        if self.sensitive and self.value is not None:
            return [self.name, MASK]
        return self.to_args()


def normalize_permissions(permissions: Union[str, Iterable[str], None]) -> Optional[str]:
    """Validate *permissions* and return them as a space separated string."""

    if permissions is None:
        return None
    if isinstance(permissions, str):
        names = permissions.split()
    else:
        names = [str(name) for name in permissions]
    unknown = [name for name in names if name not in PERMISSIONS]
    if unknown:
        raise ContractViolationError(
            f"Unknown permission(s) {', '.join(unknown)}; valid values are {', '.join(PERMISSIONS)}."
        )
    return " ".join(names) or None


class OptionSet:
    """Ordered collection of :class:`Option` entries keyed by name."""

    def __init__(self) -> None:
        self._options: dict[str, Option] = {}

    def add(self, name: str, value: Optional[str] = None, sensitive: bool = False) -> "OptionSet":
        """Add or replace the option *name*, keeping its original position."""

        if name in ("flatten", "need_appearances"):
            other = "need_appearances" if name == "flatten" else "flatten"
            if other in self._options:
                LOGGER.warning("'%s' should not be combined with '%s'", name, other)
        self._options[name] = Option(name, None if value is None else str(value), sensitive)
        return self

    def discard(self, *names: str) -> "OptionSet":
        for name in names:
            self._options.pop(name, None)
        return self

    def get(self, name: str) -> Optional[Option]:
        return self._options.get(name)

    def names(self) -> list[str]:
        return list(self._options)

    def __contains__(self, name: object) -> bool:
        return name in self._options

    def __iter__(self) -> Iterator[Option]:
        return iter(list(self._options.values()))

    def __len__(self) -> int:
        return len(self._options)

    def to_args(self) -> list[str]:
        args: list[str] = []
        for option in self._options.values():
            args.extend(option.to_args())
        return args

    def to_display_args(self) -> list[str]:
        args: list[str] = []
        for option in self._options.values():
            args.extend(option.to_display_args())
        return args


def parse_options(tokens: list[str]) -> list[Option]:
    """Rebuild :class:`Option` entries from the tokens following ``output``.

    ``allow`` consumes every following permission name.
    """

    options: list[Option] = []
    index = 0
    while index < len(tokens):
        name = tokens[index]
        index += 1
        if name == "allow":
            permissions: list[str] = []
            while index < len(tokens) and tokens[index] in PERMISSIONS:
                permissions.append(tokens[index])
                index += 1
            options.append(Option("allow", " ".join(permissions) or None))
        elif name in VALUE_OPTIONS:
            if index >= len(tokens):
                raise ContractViolationError(f"Option {name!r} is missing its value.")
            options.append(Option(name, tokens[index], name in SENSITIVE_OPTIONS))
            index += 1
        elif name in FLAG_OPTIONS:
            options.append(Option(name))
        else:
            raise ContractViolationError(f"Unknown pdftk option {name!r}.")
    return options


__all__ = [
    "FLAG_OPTIONS",
    "MASK",
    "PERMISSIONS",
    "SENSITIVE_OPTIONS",
    "VALUE_OPTIONS",
    "Option",
    "OptionSet",
    "normalize_permissions",
    "parse_options",
]
