"""Deep, key-name-based property replacement inside JSON-bearing blocks.

Every object member named ``property_name`` is replaced, at any depth,
in every block whose normalized name contains the normalized selector.
The container carries no stable paths into these documents, so the patch
is deliberately unscoped.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from ssf_core import jsondoc
from ssf_core.blocks import Block, BlockSequence
from ssf_core.errors import PatchNotApplicable, ValidationError
from ssf_core.fragments import looks_like_json
from ssf_core.names import normalize_name, selector_matches


@dataclass(frozen=True)
class PatchSpec:
    selector: str  # normalized
    property_name: str
    value: Any

    @classmethod
    def create(cls, selector: str, property_name: str, value_json: str | bytes) -> "PatchSpec":
        """Validate caller input before any block is looked at."""
        selector_norm = normalize_name(selector or "")
        if not selector_norm:
            raise ValidationError("Block selector must not be empty")
        if not property_name or not property_name.strip():
            raise ValidationError("Property name must not be empty")
        try:
            value = jsondoc.loads(value_json)
        except ValueError as e:
            raise ValidationError(f"Replacement value is not valid JSON: {e}") from e
        return cls(selector_norm, property_name, value)


@dataclass(frozen=True)
class PatchResult:
    sequence: BlockSequence
    blocks_modified: int
    properties_replaced: int
    modified_names: tuple[str, ...] = ()


def replace_property(node: Any, property_name: str, value: Any) -> int:
    """Replace ``property_name`` everywhere under ``node`` in place; return the count.

    Inserted values are not walked again.
    """
    patched = 0
    if isinstance(node, dict):
        for key in list(node):
            if key == property_name:
                node[key] = copy.deepcopy(value)
                patched += 1
            else:
                patched += replace_property(node[key], property_name, value)
    elif isinstance(node, list):
        for child in node:
            patched += replace_property(child, property_name, value)
    return patched


def patch_block(block: Block, spec: PatchSpec) -> tuple[Block, int]:
    """Return the (possibly new) block and the number of replacements made."""
    if not selector_matches(block.name, spec.selector) or not looks_like_json(block.payload):
        return block, 0

    try:
        doc = jsondoc.loads(block.payload, unique_keys=True)
    except ValueError:
        # Matched by name but not a JSON document we can rewrite losslessly; leave it alone.
        return block, 0

    count = replace_property(doc, spec.property_name, spec.value)
    if count == 0:
        return block, 0
    return block.with_payload(jsondoc.dumps_compact(doc)), count


def apply_patch(sequence: BlockSequence, spec: PatchSpec) -> PatchResult:
    new_blocks: list[Block] = []
    modified: list[str] = []
    matched = 0
    total = 0

    for block in sequence.blocks:
        if selector_matches(block.name, spec.selector):
            matched += 1
        new_block, count = patch_block(block, spec)
        if count:
            modified.append(block.name)
            total += count
        new_blocks.append(new_block)

    if not modified:
        raise PatchNotApplicable(
            f"No JSON blocks matched selector '{spec.selector}' with replaceable property "
            f"'{spec.property_name}' ({matched} block(s) matched by name)"
        )

    return PatchResult(
        sequence=sequence.replace_blocks(new_blocks),
        blocks_modified=len(modified),
        properties_replaced=total,
        modified_names=tuple(modified),
    )


def apply_property_patch(
    sequence: BlockSequence,
    selector: str,
    property_name: str,
    value_json: str | bytes,
) -> PatchResult:
    """Replace ``property_name`` with ``value_json`` in every selected JSON block."""
    return apply_patch(sequence, PatchSpec.create(selector, property_name, value_json))
