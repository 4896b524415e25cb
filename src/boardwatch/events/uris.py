"""Resource URI templates and builders.

URIs are opaque to the registry; only this module and the mapper know
their shape. Templates are relative to the configured scheme
(planka:// by default) and name the payload ids they need.
"""

from boardwatch.config import settings

BOARD = "boards/{board_id}"
LIST = "lists/{list_id}"
LIST_CARDS = "lists/{list_id}/cards"
PREV_LIST_CARDS = "lists/{prev_list_id}/cards"
CARD = "cards/{card_id}"
CARD_COMMENTS = "cards/{card_id}/comments"
NOTIFICATIONS = "notifications"


def build(template: str, scheme: str | None = None, **ids: str) -> str:
    base = f"{scheme}://" if scheme else settings.uri_base
    return base + template.format(**ids)


def board_uri(board_id: str, scheme: str | None = None) -> str:
    return build(BOARD, scheme, board_id=board_id)


def list_cards_uri(list_id: str, scheme: str | None = None) -> str:
    return build(LIST_CARDS, scheme, list_id=list_id)


def card_uri(card_id: str, scheme: str | None = None) -> str:
    return build(CARD, scheme, card_id=card_id)
