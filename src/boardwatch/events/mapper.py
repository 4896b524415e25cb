"""Event mapper — which resource URIs does a board event invalidate?

Learn: The mapping is a data table, not a chain of if/elif. Each event
type tag points at a UriRule: the URI templates it touches. A template
is emitted only when every id it names could be found in the payload,
so a payload missing its ids simply maps to fewer (or zero) URIs.

Ids are looked up at the payload's top level first, then under the
nested `item` object that Planka sends. For events whose item *is* the
resource (a card for card events, a list for list events, a board for
board events) item.id also counts as that resource's id. For child
events (comments, tasks, attachments, labels) item.id is the child's
own id and never stands in for the parent.

Adding an event type means adding a row to RULES.
"""

import string
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from boardwatch.events import types, uris

# Payload key for each template placeholder
FIELD_KEYS: dict[str, str] = {
    "board_id": "boardId",
    "list_id": "listId",
    "card_id": "cardId",
    "prev_list_id": "prevListId",
}


@dataclass(frozen=True)
class UriRule:
    """URI templates affected by one family of events."""
    templates: tuple[str, ...]
    item_id_field: Optional[str] = None  # placeholder that item.id may fill


CARD_CREATED = UriRule((uris.BOARD, uris.LIST_CARDS))
CARD_CHANGED = UriRule(
    (uris.CARD, uris.BOARD, uris.LIST_CARDS, uris.PREV_LIST_CARDS),
    item_id_field="card_id",
)
LIST_CHANGED = UriRule((uris.LIST, uris.LIST_CARDS, uris.BOARD), item_id_field="list_id")
BOARD_CHANGED = UriRule((uris.BOARD,), item_id_field="board_id")
LABEL_CHANGED = UriRule((uris.BOARD,))
COMMENT_CHANGED = UriRule((uris.CARD, uris.CARD_COMMENTS))
CARD_CHILD_CHANGED = UriRule((uris.CARD,))
NOTIFICATION_CREATED = UriRule((uris.NOTIFICATIONS,))

RULES: dict[str, UriRule] = {
    types.CARD_CREATE: CARD_CREATED,
    types.CARD_UPDATE: CARD_CHANGED,
    types.CARD_DELETE: CARD_CHANGED,
    types.LIST_CREATE: LIST_CHANGED,
    types.LIST_UPDATE: LIST_CHANGED,
    types.LIST_DELETE: LIST_CHANGED,
    types.BOARD_CREATE: BOARD_CHANGED,
    types.BOARD_UPDATE: BOARD_CHANGED,
    types.BOARD_DELETE: BOARD_CHANGED,
    types.LABEL_CREATE: LABEL_CHANGED,
    types.LABEL_UPDATE: LABEL_CHANGED,
    types.LABEL_DELETE: LABEL_CHANGED,
    types.COMMENT_CREATE: COMMENT_CHANGED,
    types.COMMENT_UPDATE: COMMENT_CHANGED,
    types.COMMENT_DELETE: COMMENT_CHANGED,
    types.TASK_CREATE: CARD_CHILD_CHANGED,
    types.TASK_UPDATE: CARD_CHILD_CHANGED,
    types.TASK_DELETE: CARD_CHILD_CHANGED,
    types.ATTACHMENT_CREATE: CARD_CHILD_CHANGED,
    types.ATTACHMENT_UPDATE: CARD_CHILD_CHANGED,
    types.ATTACHMENT_DELETE: CARD_CHILD_CHANGED,
    types.NOTIFICATION_CREATE: NOTIFICATION_CREATED,
}


def resolve_rule(event_type: str) -> Optional[UriRule]:
    """Find the rule for an event type (exact tag, then tag prefix)."""
    rule = RULES.get(event_type)
    if rule is not None:
        return rule
    for tag, candidate in RULES.items():
        if event_type.startswith(tag):
            return candidate
    return None


def _lookup(payload: Mapping[str, Any], key: str) -> Optional[str]:
    item = payload.get("item")
    for source in (payload, item):
        if not isinstance(source, Mapping):
            continue
        value = source.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def extract_ids(payload: Mapping[str, Any], rule: UriRule) -> dict[str, str]:
    """Collect the identifying fields a rule can use from a payload."""
    ids = {}
    for field, key in FIELD_KEYS.items():
        value = _lookup(payload, key)
        if value is not None:
            ids[field] = value

    if rule.item_id_field and rule.item_id_field not in ids:
        item = payload.get("item")
        if isinstance(item, Mapping):
            item_id = item.get("id")
            if item_id is not None and item_id != "":
                ids[rule.item_id_field] = str(item_id)

    return ids


def _placeholders(template: str) -> list[str]:
    return [name for _, name, _, _ in string.Formatter().parse(template) if name]


def map_to_uris(
    event_type: str,
    payload: Mapping[str, Any] | None,
    scheme: str | None = None,
) -> list[str]:
    """Map an event type + payload to the deduplicated list of affected URIs.

    Unknown event types and payloads missing their ids map to [].
    """
    rule = resolve_rule(event_type or "")
    if rule is None:
        return []
    if not isinstance(payload, Mapping):
        payload = {}

    ids = extract_ids(payload, rule)

    result: list[str] = []
    for template in rule.templates:
        names = _placeholders(template)
        if all(name in ids for name in names):
            result.append(uris.build(template, scheme, **{n: ids[n] for n in names}))

    return list(dict.fromkeys(result))
