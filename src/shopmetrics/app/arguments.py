from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence

from shopmetrics.application.errors import ArgumentReaderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Option:
    name: str
    default: Any
    description: str
    type: Callable[[str], Any] = str
    metavar: str = "str"


class ExactOptionParser(argparse.ArgumentParser):
    """
    ArgumentParser that matches option names exactly.

    Prefixes of single-dash names (-int for -intflag) are rejected too, which
    allow_abbrev=False alone does not do.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("allow_abbrev", False)
        super().__init__(*args, **kwargs)

    def _get_option_tuples(self, option_string: str) -> list:
        return []


def parse_int(raw: str) -> int:
    """Parse an integer with base prefixes (0x, 0o, 0b) accepted."""
    return int(raw, 0)


class ParsedOptions(Mapping[str, Any]):
    """Read-only snapshot of resolved option values."""

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["_values"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"ParsedOptions({dict(self._values)!r})"


class ArgumentReader:
    """
    Declares typed options and resolves them from process arguments once.

    Values that cannot be converted to the option's type resolve to the
    declared default instead of failing the parse.
    """

    def __init__(self, prog: Optional[str] = None, description: Optional[str] = None) -> None:
        self.prog = prog
        self.description = description
        self._options: Dict[str, Option] = {}
        self._parsed: Optional[ParsedOptions] = None

    def add_string(self, name: str, default: str, description: str) -> None:
        self._add(Option(name=name, default=default, description=description, type=str))

    def add_int(self, name: str, default: int, description: str) -> None:
        self._add(Option(name=name, default=default, description=description, type=parse_int, metavar="int"))

    def _add(self, option: Option) -> None:
        if self._parsed is not None:
            raise ArgumentReaderError(f"Cannot declare option {option.name!r} after parsing")
        if option.name in self._options:
            raise ArgumentReaderError(f"Option {option.name!r} is already declared")
        self._options[option.name] = option

    def _ensure_unparsed(self) -> None:
        if self._parsed is not None:
            raise ArgumentReaderError("Arguments have already been parsed")

    def register(self, parser: argparse.ArgumentParser) -> None:
        """Attach the declared options to an existing (sub)parser."""
        for option in self._options.values():
            parser.add_argument(
                f"-{option.name}",
                f"--{option.name}",
                dest=option.name,
                default=None,
                metavar=option.metavar,
                help=(
                    f"{option.description} (default: {option.default!r}; "
                    f"pass values starting with '-' as -{option.name}=VALUE)"
                ).replace("%", "%%"),
            )

    def build_parser(self) -> argparse.ArgumentParser:
        parser = ExactOptionParser(prog=self.prog, description=self.description)
        self.register(parser)
        return parser

    def parse(self, argv: Optional[Sequence[str]] = None) -> ParsedOptions:
        self._ensure_unparsed()
        namespace = self.build_parser().parse_args(argv)
        return self.resolve(namespace)

    def resolve(self, namespace: argparse.Namespace) -> ParsedOptions:
        self._ensure_unparsed()
        values = {
            option.name: self._convert(option, getattr(namespace, option.name, None))
            for option in self._options.values()
        }
        self._parsed = ParsedOptions(values)
        return self._parsed

    def _convert(self, option: Option, raw: Optional[str]) -> Any:
        if raw is None:
            return option.default
        try:
            return option.type(raw)
        except (TypeError, ValueError):
            logger.warning(
                f"Invalid value {raw!r} for option {option.name!r}; using default {option.default!r}"
            )
            return option.default

    @property
    def options(self) -> ParsedOptions:
        if self._parsed is None:
            raise ArgumentReaderError("Options are not available before parsing")
        return self._parsed
