"""Directive tokens recognised in model and field documentation."""
from enum import Enum
from typing import FrozenSet, Optional


class Directive(str, Enum):
    IGNORE_MODEL = "@DtoIgnoreModel"
    READ_ONLY = "@DtoReadOnly"
    CREATE_HIDDEN = "@DtoCreateHidden"
    UPDATE_HIDDEN = "@DtoUpdateHidden"
    ENTITY_HIDDEN = "@DtoEntityHidden"
    API_HIDDEN = "@DtoApiHidden"
    CREATE_OPTIONAL = "@DtoCreateOptional"
    UPDATE_OPTIONAL = "@DtoUpdateOptional"
    RELATION_REQUIRED = "@DtoRelationRequired"
    RELATION_INCLUDE_ID = "@DtoRelationIncludeId"
    RELATION_CAN_CREATE_ON_CREATE = "@DtoRelationCanCreateOnCreate"
    RELATION_CAN_CONNECT_ON_CREATE = "@DtoRelationCanConnectOnCreate"
    RELATION_CAN_CREATE_ON_UPDATE = "@DtoRelationCanCreateOnUpdate"
    RELATION_CAN_CONNECT_ON_UPDATE = "@DtoRelationCanConnectOnUpdate"
    RELATION_CAN_DISCONNECT_ON_UPDATE = "@DtoRelationCanDisconnectOnUpdate"
    FULL_UPDATE = "@DtoTypeFullUpdate"
    CAST_TYPE = "@DtoCastType"


RELATION_MODIFIERS_ON_CREATE = frozenset({
    Directive.RELATION_CAN_CREATE_ON_CREATE,
    Directive.RELATION_CAN_CONNECT_ON_CREATE,
})

RELATION_MODIFIERS_ON_UPDATE = frozenset({
    Directive.RELATION_CAN_CREATE_ON_UPDATE,
    Directive.RELATION_CAN_CONNECT_ON_UPDATE,
    Directive.RELATION_CAN_DISCONNECT_ON_UPDATE,
})

RELATION_MODIFIERS = RELATION_MODIFIERS_ON_CREATE | RELATION_MODIFIERS_ON_UPDATE

# Directives that only make sense on a relation field
RELATION_DIRECTIVES = RELATION_MODIFIERS | {
    Directive.RELATION_REQUIRED,
    Directive.RELATION_INCLUDE_ID,
}

MODEL_DIRECTIVES = frozenset({Directive.IGNORE_MODEL, Directive.FULL_UPDATE})


def has_directive(text: Optional[str], directive: Directive) -> bool:
    """Check whether documentation text carries a directive token."""
    if not text:
        return False
    return directive.value in text


def parse_directives(text: Optional[str]) -> FrozenSet[Directive]:
    """Collect every known directive present in the text.

    Anything that is not a known token is prose and is ignored.
    """
    return frozenset(d for d in Directive if has_directive(text, d))


def strip_directives(text: Optional[str]) -> str:
    """Return documentation with directive lines removed."""
    if not text:
        return ""
    kept = [
        line for line in text.splitlines()
        if not any(d.value in line for d in Directive)
    ]
    return "\n".join(kept).strip()
