"""
Switchyard parser: token classification state machine and entry points.

What this module provides
- Parser: consumes one token stream against one Schema. Created per parse,
  never reused; all of its state dies with it.
- try_parse(schema, args): parse and return the Namespace, or raise ParseError.
- parse_or_exit(schema, args): same, but print "error: <message>" to stderr and
  exit with status 1 on failure.

Grammar (after discarding the program name)
    --name            long flag, or long option taking the next token
    --name=VALUE      long option with inline value (error on a flag)
    -c                short flag, or short option taking the next token
    -cVALUE, -c=VALUE short option with inline value
    -abc              short flags a, b, c
    -abo VALUE        flags a, b then option o (also -aboVALUE, -abo=VALUE)
    --                every remaining token is positional
    anything else     positional, by declaration order ('-' alone included)

Positional overflow
- tokens beyond the declared positionals go to the last positional when it is
  multiple; otherwise TooManyPositionalError names the first excess token.

Finalization
- after the loop, specs are visited in declaration order: unassigned multiple
  specs receive their default sequence, and the first required spec without an
  assignment raises MissingRequiredArgumentError (only the first is reported).
"""
import logging
import os
import shlex
import sys
from collections.abc import Iterable

from .faults import (
    ParseError,
    UnknownSwitchError,
    TooManyPositionalError,
    MissingRequiredArgumentError,
    MissingValueError,
    UnexpectedValueError,
    InvalidUtf8Error,
)
from .schema import Schema
from .sinks import Namespace
from .utils import Unset

logger = logging.getLogger(__name__)


def _textual(token, /):
    """
    Return token as text, rejecting anything that is not valid UTF-8.

    str tokens carrying surrogate escapes (undecodable sys.argv bytes) are
    rejected the same way as undecodable bytes.
    """
    if isinstance(token, os.PathLike):
        token = os.fspath(token)
    if isinstance(token, bytes):
        try:
            return token.decode("utf-8")
        except UnicodeDecodeError as error:
            raise InvalidUtf8Error(token=token) from error
    if isinstance(token, str):
        try:
            token.encode("utf-8")
        except UnicodeEncodeError as error:
            raise InvalidUtf8Error(token=token) from error
        return token
    raise TypeError("argument tokens must be strings, bytes or path-like objects")


class Parser:
    """
    One-shot state machine over a token stream.

    state
    - consumed_positional_count: positionals matched so far.
    - positional_only: set by a bare '--'.
    - assigned: names of the specs that received at least one assignment.
    """

    def __init__(self, schema, tokens, /):
        if not isinstance(schema, Schema):
            raise TypeError("Parser() first argument must be a Schema")
        self._schema = schema
        self._tokens = iter(tokens)
        self._consumed = 0
        self._positional_only = False
        self._assigned = set()
        self._position = 0
        self._done = False

    @property
    def consumed_positional_count(self):
        return self._consumed

    @property
    def positional_only(self):
        return self._positional_only

    @property
    def assigned(self):
        return frozenset(self._assigned)

    def _pull(self):
        """next raw token, or Unset at the end of the stream."""
        token = next(self._tokens, Unset)
        if token is not Unset:
            self._position += 1
        return token

    def parse(self):
        """run the whole pass; raises the first ParseError encountered."""
        if self._done:
            raise RuntimeError("parser instances cannot be reused")
        self._done = True

        self._pull()  # program name, never classified
        logger.debug("parsing against %r", self._schema)
        try:
            while (token := self._pull()) is not Unset:
                self._dispatch(_textual(token))
            self._finalize()
        except ParseError as error:
            logger.debug("parse aborted at token %d: %s (%s)", self._position, error, error.kind.name)
            raise

    def _dispatch(self, token, /):
        if self._positional_only:
            return self._parse_positional(token)
        if token.startswith("--"):
            if token == "--":
                logger.debug("token %d: '--', remaining tokens are positional", self._position)
                self._positional_only = True
                return
            logger.debug("token %d: long switch %r", self._position, token)
            return self._parse_long(token[2:])
        if token.startswith("-") and len(token) > 1:
            logger.debug("token %d: short cluster %r", self._position, token)
            return self._parse_short(token[1], token[2:])
        return self._parse_positional(token)

    def _next_value(self, spec, switch, /):
        """consume the following token verbatim as the value of an option."""
        token = self._pull()
        if token is Unset:
            raise MissingValueError(name=spec.name, switch=switch)
        return _textual(token)

    def _parse_long(self, body, /):
        name, separator, value = body.partition("=")
        switch = "--" + name

        if (flag := self._schema.flag_by_long(name)) is not None:
            if separator:
                raise UnexpectedValueError(switch=switch, name=flag.name)
            return self._assign_flag(flag)

        if (option := self._schema.option_by_long(name)) is not None:
            if not separator:
                value = self._next_value(option, switch)
            return self._assign_value(option, value)

        raise UnknownSwitchError(switch=switch)

    def _parse_short(self, short, rest, /):
        if (flag := self._schema.flag_by_short(short)) is not None:
            self._parse_short_flag(flag, short, rest)
            for offset, short in enumerate(rest, 1):
                if (flag := self._schema.flag_by_short(short)) is not None:
                    self._parse_short_flag(flag, short, rest[offset:])
                elif (option := self._schema.option_by_short(short)) is not None:
                    return self._parse_short_option(option, short, rest[offset:])
                else:
                    raise UnknownSwitchError(switch="-" + short)
            return

        if (option := self._schema.option_by_short(short)) is not None:
            return self._parse_short_option(option, short, rest)

        raise UnknownSwitchError(switch="-" + short)

    def _parse_short_flag(self, flag, short, rest, /):
        if rest.startswith("="):
            raise UnexpectedValueError(switch="-" + short, name=flag.name)
        self._assign_flag(flag)

    def _parse_short_option(self, option, short, rest, /):
        if not rest:
            value = self._next_value(option, "-" + short)
        elif rest.startswith("="):
            value = rest[1:]
        else:
            value = rest
        self._assign_value(option, value)

    def _parse_positional(self, token, /):
        positionals = self._schema.positionals
        if self._consumed < len(positionals):
            spec = positionals[self._consumed]
        elif positionals and positionals[-1].multiple:
            spec = positionals[-1]
        else:
            raise TooManyPositionalError(token=token)
        logger.debug("token %d: positional %r -> %s", self._position, token, spec.name)
        self._consumed += 1
        self._assign_value(spec, token)

    def _assign_flag(self, flag, /):
        flag.assign()
        self._assigned.add(flag.name)

    def _assign_value(self, spec, raw, /):
        spec.assign(raw)
        self._assigned.add(spec.name)

    def _finalize(self):
        for spec in self._schema.specs:
            if not spec.takes_value or spec.name in self._assigned:
                continue
            if spec.multiple and spec.default is not Unset:
                for value in spec.default:
                    spec.sink.assign(value)
            elif spec.required:
                raise MissingRequiredArgumentError(name=spec.name)


def _acquire(args, /):
    """
    Normalize the caller's tokens.

    - Unset: the live process arguments (sys.argv, program name included).
    - str: a shell-like command line, split with shlex.split.
    - Iterable: used as-is (items are checked lazily by the parser).
    """
    if args is Unset:
        return list(sys.argv)
    if isinstance(args, str):
        return shlex.split(args)
    if isinstance(args, bytes) or not isinstance(args, Iterable):
        raise TypeError("args must be a string or an iterable of tokens")
    return args


def try_parse(schema, args=Unset, /):
    """
    Parse args against schema and return the decoded Namespace.

    The builder-owned slot table is reset first, so repeated calls do not
    leak values between parses. Sinks supplied by the caller are left alone.
    Errors propagate unchanged as ParseError subclasses.
    """
    if not isinstance(schema, Schema):
        raise TypeError("try_parse() first argument must be a Schema")
    tokens = _acquire(args)
    if schema.slots is not None:
        schema.slots.reset()
    Parser(schema, tokens).parse()
    return schema.slots.namespace() if schema.slots is not None else Namespace()


def parse_or_exit(schema, args=Unset, /, *, colorful=Unset):
    """
    Like try_parse, but a ParseError is printed as "error: <message>" on
    stderr and the process exits with status 1.
    """
    try:
        return try_parse(schema, args)
    except ParseError as error:
        logger.debug("exiting after %s", error.kind.name)
        error.exit(colorful=colorful)


__all__ = (
    "Parser",
    "try_parse",
    "parse_or_exit",
)
