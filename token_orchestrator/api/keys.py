"""
Key lifecycle endpoints
"""
from fastapi import APIRouter, Depends, Request

from ..schemas.key import ErrorOut, KeyCreated, KeyInfoOut, KeyOut, Message
from ..services.keystore import KeyStore

router = APIRouter(tags=["Keys"])

NOT_FOUND = {404: {"model": ErrorOut, "description": "Key not found"}}
FORBIDDEN = {403: {"model": ErrorOut, "description": "Key is blocked or expired"}}
BAD_REQUEST = {400: {"model": ErrorOut, "description": "Malformed block flag"}}


def get_store(request: Request) -> KeyStore:
    return request.app.state.store


@router.post("/keys", status_code=201, response_model=KeyCreated)
def create_key(store: KeyStore = Depends(get_store)):
    """Generate a new key. No lease is engaged until the first keep-alive."""
    key_id, _ = store.issue()
    return KeyCreated(keyId=key_id)


@router.get("/keys/{key_id}", response_model=KeyOut, responses={**NOT_FOUND, **FORBIDDEN})
def get_key(key_id: str, store: KeyStore = Depends(get_store)):
    """Retrieve a key for client use; blocked or expired keys are refused"""
    return KeyOut(keyId=key_id, key=store.fetch(key_id))


@router.get("/keys/{key_id}/info", response_model=KeyInfoOut, responses=NOT_FOUND)
def get_key_info(key_id: str, store: KeyStore = Depends(get_store)):
    """Describe a key, including blocked and expired ones"""
    return KeyInfoOut.from_info(store.describe(key_id))


@router.delete("/keys/{key_id}", response_model=Message, responses=NOT_FOUND)
def delete_key(key_id: str, store: KeyStore = Depends(get_store)):
    store.delete(key_id)
    return Message(message="Key deleted successfully")


@router.put("/keys/{key_id}", response_model=Message, responses={**NOT_FOUND, **BAD_REQUEST})
async def set_key_blocked(key_id: str, request: Request, store: KeyStore = Depends(get_store)):
    """Block or unblock a key. Body: {"blocked": true|false}"""
    # Parsed by hand so a missing or non-JSON body is reported as a bad flag
    try:
        body = await request.json()
    except ValueError:
        body = None
    blocked = body.get("blocked") if isinstance(body, dict) else None

    blocked = store.set_blocked(key_id, blocked)
    return Message(message=f"Key {'blocked' if blocked else 'unblocked'} successfully")


@router.put("/keys/{key_id}/alive", response_model=Message, responses={**NOT_FOUND, **FORBIDDEN})
def keep_key_alive(key_id: str, store: KeyStore = Depends(get_store)):
    """Signal liveness: engages the lease on first call, renews it afterwards"""
    store.keep_alive(key_id)
    return Message(message="Key keep-alive signal received")
