import logging

from functions import bot_responder, bots
from functions.llm import ChatCompletionClient
from supabase_client import get_service_client

logger = logging.getLogger(__name__)


def _create_bots(client):
    return bots.create_bots(client)


def _update_bot_photos(client):
    return bots.update_bot_photos(client, ChatCompletionClient())


def _bot_responder(client):
    return bot_responder.run_pass(client)


def _cleanup_bots(client):
    return bots.cleanup_bots(client)


def _delete_bot_users(client):
    return bots.delete_bot_users(client)


HANDLERS = {
    "create-bots": _create_bots,
    "update-bot-photos": _update_bot_photos,
    "bot-responder": _bot_responder,
    "cleanup-bots": _cleanup_bots,
    "delete-bot-users": _delete_bot_users,
}


def invoke(name, client=None):
    """Run one admin function. Returns (status code, JSON-able body)."""
    handler = HANDLERS.get(name)
    if handler is None:
        return 404, {"error": f"Unknown function {name!r}"}
    try:
        client = client or get_service_client()
        return 200, handler(client)
    except Exception as e:
        logger.exception("Error in %s", name)
        return 500, {"error": str(e) or e.__class__.__name__}
