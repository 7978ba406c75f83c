"""Typed grammar for crate-level attributes.

Inner attributes such as `#![cfg_attr(not(feature = "std"), no_std)]` are
lowered from tree-sitter token trees into a small token model, parsed into
meta items and cfg predicates, and finally classified as one of three
no_std marker outcomes.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple, Optional, Sequence, Union

from nono_analyzer.constants import CFG_ATTR, NO_STD_ATTRIBUTE

_COMMENT_TYPES = {"line_comment", "block_comment"}
_STRING_TYPES = {"string_literal", "raw_string_literal"}


class Ident(NamedTuple):
    text: str


class Literal(NamedTuple):
    value: str


class Punct(NamedTuple):
    text: str


class Group(NamedTuple):
    delimiter: str
    tokens: tuple["Token", ...]


Token = Union[Ident, Literal, Punct, Group]


class MetaWord(NamedTuple):
    """`name`"""

    name: str


class MetaNameValue(NamedTuple):
    """`name = "value"`"""

    name: str
    value: str


class MetaList(NamedTuple):
    """`name(item, item, ...)`, items kept as raw token sequences."""

    name: str
    items: tuple[tuple[Token, ...], ...]


Meta = Union[MetaWord, MetaNameValue, MetaList]


class CfgOption(NamedTuple):
    """`test` or `feature = "std"`."""

    name: str
    value: Optional[str] = None


class CfgNot(NamedTuple):
    predicate: "CfgPredicate"


class CfgAll(NamedTuple):
    predicates: tuple["CfgPredicate", ...]


class CfgAny(NamedTuple):
    predicates: tuple["CfgPredicate", ...]


CfgPredicate = Union[CfgOption, CfgNot, CfgAll, CfgAny]


class MarkerKind(Enum):
    """Classification of one crate-level attribute."""

    UNCONDITIONAL = "unconditional"
    UNLESS_FEATURE = "unless_feature"
    OTHER = "other"


class NoStdMarker(NamedTuple):
    """Outcome of classifying an attribute.

    Attributes:
        kind: Marker classification.
        feature: Gating feature for UNLESS_FEATURE, None otherwise.
    """

    kind: MarkerKind
    feature: Optional[str] = None


OTHER_ATTRIBUTE = NoStdMarker(MarkerKind.OTHER)


def _is_punct(token: Token, text: str) -> bool:
    return isinstance(token, Punct) and token.text == text


def _is_word(meta: Optional[Meta], name: str) -> bool:
    return isinstance(meta, MetaWord) and meta.name == name


def _negated_option(predicate: Optional[CfgPredicate]) -> Optional[CfgOption]:
    """The option inside `not(option)`, None for any other predicate."""
    if isinstance(predicate, CfgNot) and isinstance(predicate.predicate, CfgOption):
        return predicate.predicate
    return None


def unquote_string_literal(text: str) -> str:
    """`"std"` -> `std`, `r#"std"#` -> `std`."""
    if text.startswith("r"):
        text = text[1:].strip("#")
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


def lower_token_tree(node: Any) -> Group:
    """Lower a tree-sitter `token_tree` node into a Group.

    Args:
        node: A tree-sitter node of type `token_tree`.

    Returns:
        Group holding the tokens between the delimiters.
    """
    children = [child for child in node.children if child.type not in _COMMENT_TYPES]
    delimiter = children[0].type if children else "("
    tokens: list[Token] = []
    for child in children[1:-1]:
        text = child.text.decode("utf-8")
        if child.type == "token_tree":
            tokens.append(lower_token_tree(child))
        elif child.type == "identifier":
            tokens.append(Ident(text))
        elif child.type in _STRING_TYPES:
            tokens.append(Literal(unquote_string_literal(text)))
        else:
            tokens.append(Punct(text))
    return Group(delimiter, tuple(tokens))


def split_commas(tokens: Sequence[Token]) -> tuple[tuple[Token, ...], ...]:
    """Split a token sequence on top-level commas, dropping a trailing comma."""
    items: list[tuple[Token, ...]] = []
    current: list[Token] = []
    for token in tokens:
        if _is_punct(token, ","):
            items.append(tuple(current))
            current = []
        else:
            current.append(token)
    if current:
        items.append(tuple(current))
    return tuple(items)


def parse_meta(tokens: Sequence[Token]) -> Optional[Meta]:
    """Parse one meta item from a token sequence.

    Returns:
        The meta item, or None if the tokens have any other shape.
    """
    if not tokens or not isinstance(tokens[0], Ident):
        return None
    name = tokens[0].text
    rest = tokens[1:]
    if not rest:
        return MetaWord(name)
    if len(rest) == 1 and isinstance(rest[0], Group) and rest[0].delimiter == "(":
        return MetaList(name, split_commas(rest[0].tokens))
    if len(rest) == 2 and _is_punct(rest[0], "=") and isinstance(rest[1], Literal):
        return MetaNameValue(name, rest[1].value)
    return None


def parse_cfg_predicate(tokens: Sequence[Token]) -> Optional[CfgPredicate]:
    """Parse a cfg predicate such as `not(feature = "std")`."""
    meta = parse_meta(tokens)
    if isinstance(meta, MetaWord):
        return CfgOption(meta.name)
    if isinstance(meta, MetaNameValue):
        return CfgOption(meta.name, meta.value)
    if isinstance(meta, MetaList):
        nested = [parse_cfg_predicate(item) for item in meta.items]
        if any(predicate is None for predicate in nested):
            return None
        if meta.name == "not" and len(nested) == 1:
            return CfgNot(nested[0])  # type: ignore[arg-type]
        if meta.name == "all":
            return CfgAll(tuple(nested))  # type: ignore[arg-type]
        if meta.name == "any":
            return CfgAny(tuple(nested))  # type: ignore[arg-type]
    return None


def attribute_meta(attribute_node: Any) -> Optional[Meta]:
    """Build the meta item of a tree-sitter `attribute` node."""
    named = [c for c in attribute_node.named_children if c.type not in _COMMENT_TYPES]
    if not named or named[0].type != "identifier":
        return None
    name = named[0].text.decode("utf-8")

    arguments = attribute_node.child_by_field_name("arguments")
    value = attribute_node.child_by_field_name("value")
    if arguments is None and value is None:
        return MetaWord(name)
    if arguments is not None:
        group = lower_token_tree(arguments)
        if group.delimiter != "(":
            return None
        return MetaList(name, split_commas(group.tokens))
    if value is not None and value.type in _STRING_TYPES:
        return MetaNameValue(name, unquote_string_literal(value.text.decode("utf-8")))
    return None


def classify_meta(meta: Optional[Meta]) -> NoStdMarker:
    """Classify a crate-level attribute.

    - `no_std` and `cfg_attr(not(test), no_std)` are UNCONDITIONAL.
    - `cfg_attr(not(feature = "X"), no_std)` is UNLESS_FEATURE with feature X.
    - Everything else is OTHER.
    """
    if _is_word(meta, NO_STD_ATTRIBUTE):
        return NoStdMarker(MarkerKind.UNCONDITIONAL)
    if not isinstance(meta, MetaList) or meta.name != CFG_ATTR or len(meta.items) < 2:
        return OTHER_ATTRIBUTE

    gated = [parse_meta(item) for item in meta.items[1:]]
    if not any(_is_word(item, NO_STD_ATTRIBUTE) for item in gated):
        return OTHER_ATTRIBUTE

    negated = _negated_option(parse_cfg_predicate(meta.items[0]))
    if negated is None:
        return OTHER_ATTRIBUTE
    if negated.name == "test" and negated.value is None:
        return NoStdMarker(MarkerKind.UNCONDITIONAL)
    if negated.name == "feature" and negated.value:
        return NoStdMarker(MarkerKind.UNLESS_FEATURE, negated.value)
    return OTHER_ATTRIBUTE


def classify_attribute(attribute_node: Any) -> NoStdMarker:
    """Classify a tree-sitter `attribute` node."""
    return classify_meta(attribute_meta(attribute_node))
